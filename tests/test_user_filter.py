from dataclasses import replace

from flagkit.user import User
from flagkit.user_filter import BUILTIN_ATTRIBUTES, UserFilter


def _full_user(key="user-key", **extra):
    return User(
        key=key,
        first_name="sam",
        last_name="smith",
        name="sammy",
        country="freedonia",
        avatar="my-avatar",
        ip="123.456.789",
        email="me@example.com",
        secondary="abcdef",
        **extra,
    )


def test_private_builtin_attributes_per_user():
    user_filter = UserFilter()
    base = _full_user()
    for attr in BUILTIN_ATTRIBUTES:
        user = replace(base, private_attribute_names=[attr])
        scrubbed = user_filter.scrub_user(user)
        assert scrubbed.private_attributes == [attr]
        assert replace(scrubbed, private_attributes=None) != user
        assert scrubbed.value_of(attr) is None or attr == "secondary"


def test_global_private_builtin_attributes():
    user = _full_user()
    for attr in BUILTIN_ATTRIBUTES:
        user_filter = UserFilter(global_private_attributes=[attr])
        scrubbed = user_filter.scrub_user(user)
        assert scrubbed.private_attributes == [attr]
        assert replace(scrubbed, private_attributes=None) != user


def test_private_custom_attribute():
    user_filter = UserFilter()
    user = User(
        key="userKey",
        private_attribute_names=["my-secret-attr"],
        custom={"my-secret-attr": "my secret value"},
    )
    scrubbed = user_filter.scrub_user(user)
    assert scrubbed.private_attributes == ["my-secret-attr"]
    assert "my-secret-attr" not in scrubbed.custom
    assert "my-secret-attr" in user.custom


def test_all_attributes_private():
    user_filter = UserFilter(all_attributes_private=True)
    user = _full_user(key="userKey", custom={"my-secret-attr": "my secret value"})
    scrubbed = user_filter.scrub_user(user)
    assert sorted(scrubbed.private_attributes) == sorted([*BUILTIN_ATTRIBUTES, "my-secret-attr"])
    assert replace(scrubbed, private_attributes=None) == User(key="userKey", custom={})
    assert "my-secret-attr" not in scrubbed.custom
    assert scrubbed.name is None


def test_anonymous_attribute_cannot_be_private():
    user_filter = UserFilter(all_attributes_private=True)
    user = User(key="userKey", anonymous=True)
    assert user_filter.scrub_user(user) == user


def test_empty_strings_are_not_reported_private():
    user_filter = UserFilter(all_attributes_private=True)
    user = User(key="userKey", name="", email="me@example.com")
    scrubbed = user_filter.scrub_user(user)
    assert scrubbed.private_attributes == ["email"]
    assert scrubbed.name == ""


def test_already_scrubbed_user_passes_through_without_private_config():
    user = User(key="userKey", private_attributes=["email"])
    assert UserFilter().scrub_user(user) == user


def test_private_attribute_names_are_cleared():
    user = User(key="userKey", email="me@example.com", private_attribute_names=["email"])
    scrubbed = UserFilter().scrub_user(user)
    assert scrubbed.private_attribute_names is None
    assert scrubbed.email is None
    assert scrubbed.key == "userKey"