"""Ordering of store data so that dependencies are written before dependents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from flagkit.versioned_data import VersionedData, VersionedDataKind

_SEGMENTS_NAMESPACE = "segments"
_FEATURES_NAMESPACE = "features"


@dataclass
class StoreCollection:
    """The items of one kind, in the order in which they should be written."""

    kind: VersionedDataKind
    items: list[VersionedData] = field(default_factory=list)


def data_kind_priority(kind: VersionedDataKind) -> int:
    """Return the write priority of a kind: segments first, then features, then the rest."""
    if kind.namespace == _SEGMENTS_NAMESPACE:
        return 0
    if kind.namespace == _FEATURES_NAMESPACE:
        return 1
    return len(kind.namespace) + 2


def _supports_dependencies(kind: VersionedDataKind) -> bool:
    return kind.namespace == _FEATURES_NAMESPACE


def _dependency_keys(item: VersionedData) -> Iterable[str]:
    return [prereq.key for prereq in getattr(item, "prerequisites", None) or ()]


def _items_in_dependency_order(items: Mapping[str, VersionedData]) -> list[VersionedData]:
    remaining = dict(items)
    ordered: list[VersionedData] = []

    def visit(item: VersionedData) -> None:
        remaining.pop(item.key, None)
        for prereq_key in _dependency_keys(item):
            prereq = remaining.get(prereq_key)
            if prereq is not None:
                visit(prereq)
        ordered.append(item)

    while remaining:
        visit(next(iter(remaining.values())))
    return ordered


def transform_unordered_data_to_ordered_data(
    all_data: Mapping[VersionedDataKind, Mapping[str, VersionedData]],
) -> list[StoreCollection]:
    """Arrange a full data set into collections in a safe write order.

    Segments come before features, and every feature flag comes after the
    flags it names as prerequisites.
    """
    collections = [
        StoreCollection(
            kind,
            _items_in_dependency_order(items) if _supports_dependencies(kind) else list(items.values()),
        )
        for kind, items in all_data.items()
    ]
    collections.sort(key=lambda coll: data_kind_priority(coll.kind))
    return collections