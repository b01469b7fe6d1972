"""Tests for utils/user_context.py - caller propagation via contextvars."""

from uuid import uuid4

import pytest

from utils.user_context import (
    CurrentUser,
    clear_current_user,
    get_current_user,
    get_current_user_id,
    get_current_user_or_none,
    set_current_user,
    user_context,
)


def _user(role="admin"):
    return CurrentUser(id=uuid4(), role=role)


class TestGetCurrentUser:

    def test_raises_without_set(self):
        with pytest.raises(RuntimeError, match="No user context"):
            get_current_user()

    def test_or_none_on_public_routes(self):
        assert get_current_user_or_none() is None


class TestSetAndClear:

    def test_set_then_get(self):
        user = _user()
        set_current_user(user)

        assert get_current_user() is user
        assert get_current_user_id() == user.id

    def test_clear(self):
        set_current_user(_user())
        clear_current_user()

        with pytest.raises(RuntimeError):
            get_current_user_id()


class TestUserContext:

    def test_restores_previous_caller(self):
        outer, inner = _user("admin"), _user("support")
        set_current_user(outer)

        with user_context(inner):
            assert get_current_user() is inner

        assert get_current_user() is outer

    def test_cleared_after_exception(self):
        with pytest.raises(ValueError):
            with user_context(_user()):
                raise ValueError("boom")

        assert get_current_user_or_none() is None


class TestHasRole:

    def test_membership(self):
        user = _user("support_staff")

        assert user.has_role("support_admin", "support_staff")
        assert not user.has_role("admin")
