"""A feature store built on a simple core, adding caching and write ordering."""

from __future__ import annotations

import json
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Mapping

from flagkit.utils.dependency_ordering import StoreCollection, transform_unordered_data_to_ordered_data
from flagkit.versioned_data import VersionedData, VersionedDataKind

_INIT_CHECKED_KEY = "$initChecked"
_MISSING = object()


def unmarshal_item(kind: VersionedDataKind, raw: bytes | str) -> VersionedData:
    """Decode an item of the given kind that was stored as JSON."""
    item: Any = kind.default_item()
    data = json.loads(raw)
    if data is not None:
        builder = getattr(type(item), "from_dict", None)
        if builder is not None:
            item = builder(data)
        elif isinstance(data, dict):
            for name, value in data.items():
                if hasattr(item, name):
                    setattr(item, name, value)
        else:
            raise TypeError(f"cannot decode {type(data).__name__} into {type(item).__name__}")
    if not isinstance(item, VersionedData):
        raise TypeError(f"unexpected data type from JSON unmarshal: {type(item).__name__}")
    return item


class FeatureStoreCoreBase(ABC):
    """Operations common to atomic and non-atomic store cores."""

    @abstractmethod
    def get_internal(self, kind: VersionedDataKind, key: str) -> VersionedData | None:
        """Return one item, deleted or not, or None if there is none. No caching."""

    @abstractmethod
    def get_all_internal(self, kind: VersionedDataKind) -> dict[str, VersionedData]:
        """Return all items of a kind by key, deleted ones included. No caching."""

    @abstractmethod
    def upsert_internal(self, kind: VersionedDataKind, item: VersionedData) -> VersionedData | None:
        """Store the item unless a version at least as new exists; return the item now stored."""

    @abstractmethod
    def initialized_internal(self) -> bool:
        """Tell whether the underlying storage holds a complete data set."""

    @property
    @abstractmethod
    def cache_ttl(self) -> float:
        """Seconds that data may be kept in memory; zero means no cache."""


class FeatureStoreCore(FeatureStoreCoreBase):
    """A store core that can replace its whole data set atomically."""

    @abstractmethod
    def init_internal(self, all_data: Mapping[VersionedDataKind, Mapping[str, VersionedData]]) -> None:
        """Replace the entire contents of the store in one transaction."""


class NonAtomicFeatureStoreCore(FeatureStoreCoreBase):
    """A store core that writes a new data set item by item, in a given order."""

    @abstractmethod
    def init_collections_internal(self, all_data: list[StoreCollection]) -> None:
        """Write the collections in order, then delete obsolete items."""


class _TTLCache:
    def __init__(self, ttl: float) -> None:
        self._ttl = ttl
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return _MISSING
            value, expires = entry
            if time.monotonic() >= expires:
                del self._entries[key]
                return _MISSING
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (value, time.monotonic() + self._ttl)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def flush(self) -> None:
        with self._lock:
            self._entries.clear()


def _item_cache_key(kind: VersionedDataKind, key: str) -> str:
    return f"{kind.namespace}:{key}"


def _all_items_cache_key(kind: VersionedDataKind) -> str:
    return f"all:{kind.namespace}"


def _only_if_not_deleted(item: VersionedData | None) -> VersionedData | None:
    if item is not None and item.deleted:
        return None
    return item


class FeatureStoreWrapper:
    """A feature store that delegates storage to a core and adds optional caching.

    With a non-atomic core, initialization data is passed in dependency order.
    """

    def __init__(self, core: FeatureStoreCoreBase) -> None:
        if not isinstance(core, (FeatureStoreCore, NonAtomicFeatureStoreCore)):
            raise TypeError(f"unsupported store core: {type(core).__name__}")
        self._core = core
        ttl = core.cache_ttl
        self._cache = _TTLCache(ttl) if ttl > 0 else None
        self._inited = False
        self._init_lock = threading.Lock()

    def init(self, all_data: Mapping[VersionedDataKind, Mapping[str, VersionedData]]) -> None:
        """Replace the whole data set, refreshing the cache."""
        try:
            if isinstance(self._core, NonAtomicFeatureStoreCore):
                self._core.init_collections_internal(transform_unordered_data_to_ordered_data(all_data))
            else:
                self._core.init_internal(all_data)
        except Exception:
            if self._cache is not None:
                self._cache.flush()
            raise
        if self._cache is not None:
            self._cache.flush()
            for kind, items in all_data.items():
                self._filter_and_cache_items(kind, items)
        with self._init_lock:
            self._inited = True

    def _filter_and_cache_items(
        self, kind: VersionedDataKind, items: Mapping[str, VersionedData]
    ) -> dict[str, VersionedData]:
        # Deleted items are cached individually so get() sees them, but left out of the full set.
        filtered = {key: item for key, item in items.items() if not item.deleted}
        if self._cache is not None:
            for key, item in items.items():
                self._cache.set(_item_cache_key(kind, key), item)
            self._cache.set(_all_items_cache_key(kind), filtered)
        return filtered

    def get(self, kind: VersionedDataKind, key: str) -> VersionedData | None:
        """Return one item, or None if it is absent or deleted."""
        if self._cache is None:
            return _only_if_not_deleted(self._core.get_internal(kind, key))
        cache_key = _item_cache_key(kind, key)
        cached = self._cache.get(cache_key)
        if cached is None:
            return None
        if cached is not _MISSING and isinstance(cached, VersionedData):
            return _only_if_not_deleted(cached)
        item = self._core.get_internal(kind, key)
        self._cache.set(cache_key, item)
        return _only_if_not_deleted(item)

    def all(self, kind: VersionedDataKind) -> dict[str, VersionedData]:
        """Return all items of a kind by key."""
        if self._cache is None:
            return self._core.get_all_internal(kind)
        cached = self._cache.get(_all_items_cache_key(kind))
        if isinstance(cached, dict):
            return cached
        items = self._core.get_all_internal(kind)
        return self._filter_and_cache_items(kind, items)

    def upsert(self, kind: VersionedDataKind, item: VersionedData) -> None:
        """Add or update an item if it is newer than the stored one."""
        final_item = self._core.upsert_internal(kind, item)
        if final_item is not None and self._cache is not None:
            # Cache what the store now holds, which may be newer than the item given.
            self._cache.set(_item_cache_key(kind, item.key), final_item)
            self._cache.delete(_all_items_cache_key(kind))

    def delete(self, kind: VersionedDataKind, key: str, version: int) -> None:
        """Mark an item deleted at the given version."""
        self.upsert(kind, kind.make_deleted_item(key, version))

    def initialized(self) -> bool:
        """Tell whether the store holds a data set.

        A true answer is remembered for good; with a cache, a false answer is
        remembered for the cache lifetime.
        """
        with self._init_lock:
            if self._inited:
                return True
        if self._cache is not None and self._cache.get(_INIT_CHECKED_KEY) is not _MISSING:
            return False
        if self._core.initialized_internal():
            with self._init_lock:
                self._inited = True
            if self._cache is not None:
                self._cache.delete(_INIT_CHECKED_KEY)
            return True
        if self._cache is not None:
            self._cache.set(_INIT_CHECKED_KEY, "")
        return False