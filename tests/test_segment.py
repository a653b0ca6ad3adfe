from dataclasses import dataclass, field

import pytest

from flagkit.segment import SEGMENTS, Segment, SegmentKind, SegmentRule
from flagkit.user import User

MAX_WEIGHT = 100000
MIN_WEIGHT = 0


@dataclass
class InClause:
    attribute: str
    values: list = field(default_factory=list)
    negate: bool = False

    def matches_user_no_segments(self, user):
        return (user.value_of(self.attribute) in self.values) != self.negate


def half_bucket(user, key, bucket_by, salt):
    return 0.5


def test_explicit_include_user():
    segment = Segment(key="test", included=["foo"], salt="abcdef", version=1)
    contains, reason = segment.contains_user(User(key="foo"))
    assert contains is True
    assert reason is not None
    assert reason.kind == "included"


def test_explicit_exclude_user():
    segment = Segment(key="test", excluded=["foo"], salt="abcdef", version=1)
    contains, reason = segment.contains_user(User(key="foo"))
    assert contains is False
    assert reason is not None
    assert reason.kind == "excluded"


def test_explicit_include_has_precedence():
    segment = Segment(key="test", included=["foo"], excluded=["foo"], salt="abcdef", version=1)
    contains, reason = segment.contains_user(User(key="foo"))
    assert contains is True
    assert reason.kind == "included"


def test_matching_rule_with_full_rollout():
    rules = [
        SegmentRule(
            clauses=[InClause("email", ["test@example.com"])],
            weight=MAX_WEIGHT,
            bucketer=half_bucket,
        )
    ]
    segment = Segment(key="test", salt="abcdef", rules=rules, version=1)
    user = User(key="foo", email="test@example.com")
    contains, reason = segment.contains_user(user)
    assert contains is True
    assert reason.kind == "rule"
    assert reason.matched_rule == rules[0]


def test_matching_rule_with_zero_rollout():
    rules = [
        SegmentRule(
            clauses=[InClause("email", ["test@example.com"])],
            weight=MIN_WEIGHT,
            bucketer=half_bucket,
        )
    ]
    segment = Segment(key="test", salt="abcdef", rules=rules, version=1)
    user = User(key="foo", email="test@example.com")
    contains, reason = segment.contains_user(user)
    assert contains is False
    assert reason is None


def test_matching_rule_with_multiple_clauses():
    rules = [
        SegmentRule(
            clauses=[InClause("email", ["test@example.com"]), InClause("name", ["bob"])],
        )
    ]
    segment = Segment(key="test", salt="abcdef", rules=rules, version=1)
    user = User(key="foo", email="test@example.com", name="bob")
    contains, reason = segment.contains_user(user)
    assert contains is True
    assert reason.kind == "rule"
    assert reason.matched_rule == rules[0]


def test_non_matching_rule_with_multiple_clauses():
    rules = [
        SegmentRule(
            clauses=[InClause("email", ["test@example.com"]), InClause("name", ["bill"])],
        )
    ]
    segment = Segment(key="test", salt="abcdef", rules=rules, version=1)
    user = User(key="foo", email="test@example.com", name="bob")
    contains, reason = segment.contains_user(user)
    assert contains is False
    assert reason is None


def test_user_without_key_is_not_contained():
    segment = Segment(key="test", included=["foo"])
    assert segment.contains_user(User(name="Bob")) == (False, None)


def test_bucketer_receives_default_and_custom_bucket_by():
    calls = []

    def recording(user, key, bucket_by, salt):
        calls.append((key, bucket_by, salt))
        return 0.0

    default_rule = SegmentRule(weight=MAX_WEIGHT, bucketer=recording)
    custom_rule = SegmentRule(weight=MAX_WEIGHT, bucket_by="email", bucketer=recording)
    user = User(key="foo", email="test@example.com")
    assert default_rule.matches_user(user, "seg", "abcdef") is True
    assert custom_rule.matches_user(user, "seg", "abcdef") is True
    assert calls == [("seg", "key", "abcdef"), ("seg", "email", "abcdef")]


def test_weighted_rule_without_bucketer_raises():
    rule = SegmentRule(weight=MAX_WEIGHT)
    with pytest.raises(ValueError):
        rule.matches_user(User(key="foo"), "seg", "abcdef")


def test_failing_clause_skips_bucketing():
    def never(*args):
        raise AssertionError("should not bucket")

    rule = SegmentRule(clauses=[InClause("name", ["bill"])], weight=MAX_WEIGHT, bucketer=never)
    assert rule.matches_user(User(key="foo", name="bob"), "seg", "abcdef") is False


def test_clone_is_independent_copy():
    segment = Segment(key="test", version=3)
    copy = segment.clone()
    assert copy == segment
    copy.version = 4
    assert segment.version == 3


def test_segment_kind():
    kind = SegmentKind()
    assert kind == SEGMENTS
    assert kind.namespace == "segments"
    assert str(kind) == "segments"
    assert kind.default_item() == Segment()
    assert kind.make_deleted_item("my-segment", 8) == Segment(key="my-segment", version=8, deleted=True)


def test_from_dict_reads_json_fields():
    segment = Segment.from_dict(
        {
            "key": "my-segment",
            "version": 5,
            "included": ["a"],
            "rules": [{"id": "r1", "clauses": [], "weight": 10, "bucketBy": "email"}],
        }
    )
    assert segment.key == "my-segment"
    assert segment.version == 5
    assert segment.included == ["a"]
    assert segment.excluded == []
    assert segment.deleted is False
    assert segment.rules == [SegmentRule(clauses=[], id="r1", weight=10, bucket_by="email")]


def test_from_dict_uses_clause_factory():
    segment = Segment.from_dict(
        {"key": "s", "rules": [{"clauses": [{"attribute": "name", "values": ["bob"]}]}]},
        clause_factory=lambda raw: InClause(raw["attribute"], raw["values"]),
    )
    assert segment.contains_user(User(key="x", name="bob"))[0] is True
    assert segment.contains_user(User(key="x", name="bill"))[0] is False