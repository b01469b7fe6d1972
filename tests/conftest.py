"""Shared test fixtures for the platform test suite."""

import json
import time
from unittest.mock import Mock

import pytest

from auth.types import Role
from clients.postgres_client import PostgresClient
from tests.factories import ADMIN_ID, DISTRIBUTOR_ID, MERCHANT_USER_ID, SUPPORT_ID, SUPPORT_STAFF_ID
from utils.user_context import CurrentUser, user_context, clear_current_user


# =============================================================================
# USER CONTEXT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def reset_user_context():
    """Ensure clean user context before and after each test."""
    clear_current_user()
    yield
    clear_current_user()


@pytest.fixture
def admin_user() -> CurrentUser:
    return CurrentUser(id=ADMIN_ID, role=Role.ADMIN.value, email="admin@sabbpe.in")


@pytest.fixture
def support_user() -> CurrentUser:
    return CurrentUser(id=SUPPORT_ID, role=Role.SUPPORT.value, email="support@sabbpe.in")


@pytest.fixture
def support_staff_user() -> CurrentUser:
    """Support portal login: carries a staff id."""
    return CurrentUser(
        id=SUPPORT_ID,
        role=Role.SUPPORT_STAFF.value,
        email="staff@sabbpe.in",
        staff_id=SUPPORT_STAFF_ID,
    )


@pytest.fixture
def distributor_user() -> CurrentUser:
    return CurrentUser(id=DISTRIBUTOR_ID, role=Role.DISTRIBUTOR.value)


@pytest.fixture
def merchant_user() -> CurrentUser:
    return CurrentUser(id=MERCHANT_USER_ID, role=Role.MERCHANT.value)


@pytest.fixture
def as_admin(admin_user):
    with user_context(admin_user):
        yield admin_user


@pytest.fixture
def as_support(support_user):
    with user_context(support_user):
        yield support_user


@pytest.fixture
def as_support_staff(support_staff_user):
    with user_context(support_staff_user):
        yield support_staff_user


@pytest.fixture
def as_distributor(distributor_user):
    with user_context(distributor_user):
        yield distributor_user


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture
def db():
    """PostgresClient double. Tests script return values per query."""
    return Mock(spec=PostgresClient)


# =============================================================================
# VALKEY FIXTURES
# =============================================================================


class InMemoryValkey:
    """Dict-backed stand-in for ValkeyClient with TTL support."""

    def __init__(self):
        self._data: dict[str, tuple[str, float | None]] = {}

    def _live(self, key: str):
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and time.time() >= expires_at:
            del self._data[key]
            return None
        return entry

    def ping(self) -> bool:
        return True

    def get(self, key):
        entry = self._live(key)
        return entry[0] if entry else None

    def set(self, key, value, expire_seconds=None):
        expires_at = time.time() + expire_seconds if expire_seconds is not None else None
        self._data[key] = (str(value), expires_at)

    def delete(self, key):
        return self._data.pop(key, None) is not None

    def exists(self, key):
        return self._live(key) is not None

    def ttl(self, key):
        entry = self._live(key)
        if entry is None:
            return -2
        if entry[1] is None:
            return -1
        return max(int(entry[1] - time.time()), 0)

    def expire(self, key, seconds):
        entry = self._live(key)
        if entry is None:
            return False
        self._data[key] = (entry[0], time.time() + seconds)
        return True

    def incr(self, key):
        entry = self._live(key)
        value = int(entry[0]) + 1 if entry else 1
        self._data[key] = (str(value), entry[1] if entry else None)
        return value

    def set_json(self, key, value, expire_seconds=None):
        self.set(key, json.dumps(value), expire_seconds)

    def get_json(self, key):
        value = self.get(key)
        return json.loads(value) if value is not None else None

    def close(self):
        self._data.clear()


@pytest.fixture
def valkey():
    return InMemoryValkey()
