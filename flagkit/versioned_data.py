"""Common interfaces for string-keyed, versioned objects kept in a feature store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable


@runtime_checkable
class VersionedData(Protocol):
    """A string-keyed object with a version number and a deletion marker."""

    key: str
    version: int
    deleted: bool


class VersionedDataKind(ABC):
    """Describes one category of versioned objects that may exist in a store.

    Kinds are compared by type and namespace, so separately created instances
    of the same kind are interchangeable and can be used as dictionary keys.
    """

    @property
    @abstractmethod
    def namespace(self) -> str:
        """Short unique name of the collection of these objects, e.g. "features"."""

    @abstractmethod
    def default_item(self) -> VersionedData:
        """Return a newly created empty object of this kind."""

    @abstractmethod
    def make_deleted_item(self, key: str, version: int) -> VersionedData:
        """Return an object of this kind with the given key and version, marked deleted."""

    def __str__(self) -> str:
        return self.namespace

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionedDataKind):
            return NotImplemented
        return type(self) is type(other) and self.namespace == other.namespace

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.namespace))