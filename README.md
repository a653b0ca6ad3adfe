# flagkit

Data model and storage helpers for feature flags. The package covers users, private-attribute scrubbing, segments, versioned items, and a feature store wrapper that adds caching to a simple storage core.

## Modules

### `flagkit.user`

- `User` is a frozen dataclass. Its fields are:
  - `key`, `secondary`, `ip`, `country`, `email`
  - `first_name`, `last_name`, `avatar`, `name`
  - `anonymous`, `custom`, `derived`
  - `private_attributes`, `private_attribute_names`
- `DerivedAttribute` is a frozen dataclass with `value` and `last_derived`.
- `new_user(key)` and `new_anonymous_user(key)` create users.
- `User.value_of(attr)` looks up a value:
  - It checks a built-in attribute first. The names it accepts are `key`, `ip`, `country`, `email`, `firstName`, `lastName`, `avatar`, `name` and `anonymous`.
  - It then falls back to `custom`.
  - It returns `None` when the attribute is absent.

### `flagkit.user_filter`

`UserFilter(all_attributes_private=False, global_private_attributes=())` has one method, `scrub_user(user)`. It returns a copy of the user with private attributes removed:

- Custom attributes are removed when private.
- The non-empty built-ins in `BUILTIN_ATTRIBUTES` are removed when private.
- The names of the removed attributes are listed in `private_attributes`.
- `private_attribute_names` is cleared.

If nothing is marked private, either on the user or on the filter, the user is returned unchanged. `key` and `anonymous` are never scrubbed.

### `flagkit.segment`

- `Segment` has these fields: `key`, `included`, `excluded`, `salt`, `rules`, `version` and `deleted`. It also has two methods:
  - `Segment.from_dict(data, clause_factory=None)` builds a segment from its JSON object form.
  - `Segment.clone()` returns a shallow copy.
- `Segment.contains_user(user)` returns a pair `(bool, SegmentExplanation | None)`. It checks in this order:
  1. explicit includes;
  2. then explicit excludes;
  3. then each rule in order.

  A user without a key is never contained.
- `SegmentExplanation` has `kind` and `matched_rule`. `kind` is one of `"included"`, `"excluded"` or `"rule"`.
- `SegmentRule.matches_user(user, key, salt)` needs every clause to return true from `matches_user_no_segments(user)`. If the rule has a `weight`, the rule's `bucketer` must also return a value below `weight / 100000`. A weighted rule without a bucketer raises `ValueError`.
- `SegmentKind` is the versioned-data kind for segments, with namespace `"segments"`. `SEGMENTS` is a ready instance.

### `flagkit.versioned_data`

- `VersionedData` is a runtime-checkable protocol. Objects meet it by having `key`, `version` and `deleted`.
- `VersionedDataKind` is the abstract base for kinds. Each kind provides:
  - a `namespace` property;
  - `default_item()`;
  - `make_deleted_item(key, version)`.

  Kinds compare equal by type and namespace, so they can be used as dictionary keys.

### `flagkit.util`

- `parse_time(value)` accepts three kinds of input:
  - A `datetime` is returned as given.
  - An RFC 3339 string is converted to UTC.
  - A number is read as Unix epoch milliseconds.

  Anything else gives `None`.
- `parse_float64(value)` returns a real number as a `float`. It returns `None` for `None`, booleans, strings and other non-numbers.
- `to_json_raw_message(value)` returns compact JSON bytes:
  - Bytes are passed through as they are.
  - Dataclasses are converted through their fields.
  - A value that cannot be encoded raises `ValueError`.
- `check_for_http_error(status_code, url)` raises `HttpStatusError` for any status outside 2xx. The error carries `message` and `code`, and 401 and 404 have specific messages.
- `is_http_error_recoverable(status_code)` treats every 4xx status as permanent except 400, 408 and 429.
- `http_error_message(status_code, context, recoverable_message)` formats a log line for an HTTP error.

### `flagkit.utils.feature_store_wrapper`

`FeatureStoreWrapper(core)` wraps a storage core. The core must be one of two kinds; any other core raises `TypeError`.

- **`FeatureStoreCore`** replaces its data atomically. It implements:
  - `get_internal`
  - `get_all_internal`
  - `upsert_internal`
  - `initialized_internal`
  - the `cache_ttl` property, in seconds
  - `init_internal`
- **`NonAtomicFeatureStoreCore`** implements the same methods, except `init_internal`. It implements `init_collections_internal` instead, and receives a list of `StoreCollection` in a safe write order.

The wrapper's methods behave as follows:

- `init(all_data)` replaces the data set.
- `get(kind, key)` returns an item, or `None` if the item is missing or deleted.
- `all(kind)` returns items by key. With a cache, deleted items are left out of the result. Without a cache, it returns exactly what the core returns.
- `upsert(kind, item)` and `delete(kind, key, version)` write through to the core. `delete` stores a deleted placeholder at the given version.
- `initialized()` reports whether the data set is present:
  - Once it is true, it stays true.
  - With a cache, a false answer is remembered for the cache lifetime.

Caching applies when `cache_ttl` is greater than zero. Items and whole collections are then cached for that many seconds. A write clears the cached collection of its kind.

`unmarshal_item(kind, raw)` decodes a JSON-stored item into the kind's item type.

### `flagkit.utils.dependency_ordering`

`transform_unordered_data_to_ordered_data(all_data)` returns a list of `StoreCollection` objects, each with `kind` and `items`. The order is:

- segments first, then features, then any other kinds, as set by `data_kind_priority`;
- within features, every item comes after the items named by its `prerequisites`.

## Example

```python
from flagkit.segment import Segment
from flagkit.user import new_user

segment = Segment(key="beta", included=["alice"], salt="abcdef", version=1)
contained, explanation = segment.contains_user(new_user("alice"))
print(contained, explanation.kind)   # True included
```

A minimal in-memory store:

```python
from flagkit.segment import SEGMENTS, Segment
from flagkit.utils.feature_store_wrapper import FeatureStoreCore, FeatureStoreWrapper


class MemoryCore(FeatureStoreCore):
    def __init__(self):
        self.data = {}
        self.inited = False

    cache_ttl = 30.0

    def init_internal(self, all_data):
        self.data = {kind: dict(items) for kind, items in all_data.items()}
        self.inited = True

    def get_internal(self, kind, key):
        return self.data.get(kind, {}).get(key)

    def get_all_internal(self, kind):
        return dict(self.data.get(kind, {}))

    def upsert_internal(self, kind, item):
        items = self.data.setdefault(kind, {})
        old = items.get(item.key)
        if old is not None and old.version >= item.version:
            return old
        items[item.key] = item
        return item

    def initialized_internal(self):
        return self.inited


store = FeatureStoreWrapper(MemoryCore())
store.init({SEGMENTS: {"beta": Segment(key="beta", version=1)}})
store.delete(SEGMENTS, "beta", 2)
print(store.get(SEGMENTS, "beta"))   # None
```

## What this package does not include

This package does not include the following:

- A feature flag type.
- A flag evaluation engine.
- Clause operators or a bucketing hash. Segment rules take clause objects, and weighted rules take a `bucketer` function, both supplied by the caller.
- Any network client, polling or streaming connection.
- Any concrete persistent store. Storage is whatever core you pass to `FeatureStoreWrapper`.

## Installation

```
pip install .
```

## Running the tests

```
pip install .[test]
pytest
```