"""Removal of private attributes from users before they are sent in events."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from flagkit.user import User

# Built-in attributes that may be made private, as (attribute name, User field).
_PRIVATABLE = (
    ("avatar", "avatar"),
    ("country", "country"),
    ("ip", "ip"),
    ("firstName", "first_name"),
    ("lastName", "last_name"),
    ("name", "name"),
    ("secondary", "secondary"),
    ("email", "email"),
)

BUILTIN_ATTRIBUTES = tuple(attr for attr, _ in _PRIVATABLE)


@dataclass(frozen=True)
class UserFilter:
    """Scrubs private attributes from users according to configuration."""

    all_attributes_private: bool = False
    global_private_attributes: Iterable[str] = ()

    def scrub_user(self, user: User) -> User:
        """Return a copy of the user with private attributes removed and listed.

        If neither the user nor the filter marks anything private, the user is
        returned as it is, so an already scrubbed user passes through intact.
        """
        global_private = set(self.global_private_attributes)
        if not user.private_attribute_names and not global_private and not self.all_attributes_private:
            return user

        private = global_private | set(user.private_attribute_names or ())

        def is_private(attr: str) -> bool:
            return self.all_attributes_private or attr in private

        removed: list[str] = []
        changes: dict[str, object] = {}

        if user.custom is not None:
            kept = {}
            for name, value in user.custom.items():
                if is_private(name):
                    removed.append(name)
                else:
                    kept[name] = value
            changes["custom"] = kept

        for attr, field_name in _PRIVATABLE:
            if getattr(user, field_name) and is_private(attr):
                changes[field_name] = None
                removed.append(attr)

        changes["private_attribute_names"] = None
        changes["private_attributes"] = removed or None
        return replace(user, **changes)