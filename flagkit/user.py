"""Users whose attributes feature flags and segments are evaluated against."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

# Attribute names that are looked up on the user's own fields before custom attributes.
_VALUE_FIELDS = {
    "key": "key",
    "ip": "ip",
    "country": "country",
    "email": "email",
    "firstName": "first_name",
    "lastName": "last_name",
    "avatar": "avatar",
    "name": "name",
    "anonymous": "anonymous",
}


@dataclass(frozen=True)
class DerivedAttribute:
    """An entry in a user's derived attribute map, for internal use only."""

    value: Any
    last_derived: datetime


@dataclass(frozen=True)
class User:
    """Attributes of a user.

    Only ``key`` is mandatory for evaluation. ``private_attributes`` lists the
    names of attributes removed by scrubbing; ``private_attribute_names`` lists
    attributes that should be kept private when the user is sent in events.
    """

    key: str | None = None
    secondary: str | None = None
    ip: str | None = None
    country: str | None = None
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    avatar: str | None = None
    name: str | None = None
    anonymous: bool | None = None
    custom: dict[str, Any] | None = None
    derived: dict[str, DerivedAttribute] | None = None
    private_attributes: list[str] | None = None
    private_attribute_names: list[str] | None = None

    def value_of(self, attr: str) -> Any:
        """Return the value of a built-in or custom attribute, or None if it is absent."""
        field_name = _VALUE_FIELDS.get(attr)
        if field_name is not None:
            value = getattr(self, field_name)
            if value is not None:
                return value
        if self.custom is None:
            return None
        return self.custom.get(attr)


def new_user(key: str) -> User:
    """Create a user identified by the given key."""
    return User(key=key)


def new_anonymous_user(key: str) -> User:
    """Create an anonymous user identified by the given key."""
    return User(key=key, anonymous=True)