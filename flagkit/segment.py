"""Segments: named groups of users defined by keys and rules."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping, Protocol

from flagkit.user import User
from flagkit.versioned_data import VersionedDataKind

# Signature of a bucketing function: (user, segment key, attribute to bucket by, salt).
# It returns a value in the range [0, 1).
Bucketer = Callable[[User, str, str, str], float]


class Clause(Protocol):
    """A condition on a user's attributes that a segment rule can test."""

    def matches_user_no_segments(self, user: User) -> bool:
        """Tell whether the user satisfies the clause, without segment lookups."""


@dataclass
class SegmentRule:
    """A set of clauses, all of which a user must satisfy to match the rule.

    When ``weight`` is set, only users whose bucket value falls below
    ``weight / 100000`` match; ``bucketer`` computes that value.
    """

    clauses: list[Any] = field(default_factory=list)
    id: str | None = None
    weight: int | None = None
    bucket_by: str | None = None
    bucketer: Bucketer | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        clause_factory: Callable[[Any], Any] | None = None,
    ) -> SegmentRule:
        """Build a rule from its JSON object form."""
        raw_clauses = data.get("clauses") or []
        clauses = [clause_factory(c) for c in raw_clauses] if clause_factory else list(raw_clauses)
        return cls(
            clauses=clauses,
            id=data.get("id"),
            weight=data.get("weight"),
            bucket_by=data.get("bucketBy"),
        )

    def matches_user(self, user: User, key: str, salt: str) -> bool:
        """Tell whether the rule applies to the user within the segment ``key``."""
        if not all(clause.matches_user_no_segments(user) for clause in self.clauses):
            return False
        if self.weight is None:
            return True
        if self.bucketer is None:
            raise ValueError("segment rule has a weight but no bucketing function")
        bucket_by = self.bucket_by if self.bucket_by is not None else "key"
        bucket = self.bucketer(user, key, bucket_by, salt)
        return bucket < self.weight / 100000.0


@dataclass(frozen=True)
class SegmentExplanation:
    """Why a user was included in or excluded from a segment."""

    kind: str
    matched_rule: SegmentRule | None = None


@dataclass
class Segment:
    """A group of users, described by explicit keys and by rules."""

    key: str = ""
    included: list[str] = field(default_factory=list)
    excluded: list[str] = field(default_factory=list)
    salt: str = ""
    rules: list[SegmentRule] = field(default_factory=list)
    version: int = 0
    deleted: bool = False

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        clause_factory: Callable[[Any], Any] | None = None,
    ) -> Segment:
        """Build a segment from its JSON object form; missing fields take defaults."""
        return cls(
            key=data.get("key") or "",
            included=list(data.get("included") or []),
            excluded=list(data.get("excluded") or []),
            salt=data.get("salt") or "",
            rules=[SegmentRule.from_dict(r, clause_factory) for r in data.get("rules") or []],
            version=data.get("version") or 0,
            deleted=bool(data.get("deleted", False)),
        )

    def clone(self) -> Segment:
        """Return a shallow copy of the segment."""
        return replace(self)

    def contains_user(self, user: User) -> tuple[bool, SegmentExplanation | None]:
        """Tell whether the user belongs to the segment, and why."""
        if user.key is None:
            return False, None
        if user.key in self.included:
            return True, SegmentExplanation("included")
        if user.key in self.excluded:
            return False, SegmentExplanation("excluded")
        for rule in self.rules:
            if rule.matches_user(user, self.key, self.salt):
                return True, SegmentExplanation("rule", rule)
        return False, None


class SegmentKind(VersionedDataKind):
    """The kind of versioned data that describes segments."""

    @property
    def namespace(self) -> str:
        return "segments"

    def default_item(self) -> Segment:
        return Segment()

    def make_deleted_item(self, key: str, version: int) -> Segment:
        return Segment(key=key, version=version, deleted=True)


SEGMENTS = SegmentKind()