"""Propagate the authenticated caller through the call stack using contextvars."""

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class CurrentUser:
    """Identity extracted from a verified JWT."""

    id: UUID
    role: str
    email: str | None = None
    staff_id: UUID | None = None

    def has_role(self, *roles: str) -> bool:
        return self.role in roles


_current_user: ContextVar[CurrentUser | None] = ContextVar("current_user", default=None)


def get_current_user() -> CurrentUser:
    """
    Get the current caller from context.

    Raises RuntimeError if no user context is set.
    This is fail-fast behavior - if you're in a code path that
    requires a caller and it's not set, that's a bug.
    """
    user = _current_user.get()
    if user is None:
        raise RuntimeError(
            "No user context set. This usually means you're calling "
            "user-scoped code outside of an authenticated request."
        )
    return user


def get_current_user_id() -> UUID:
    """Shortcut for get_current_user().id."""
    return get_current_user().id


def get_current_user_or_none() -> CurrentUser | None:
    """Caller if authenticated, None on public routes."""
    return _current_user.get()


def set_current_user(user: CurrentUser) -> None:
    """
    Set current caller in context.

    Called by auth middleware after verifying the bearer token.
    """
    _current_user.set(user)


def clear_current_user() -> None:
    """
    Clear user context.

    Called by auth middleware after request completes.
    Must be called in finally block to prevent context leakage.
    """
    _current_user.set(None)


@contextmanager
def user_context(user: CurrentUser):
    """
    Context manager for temporarily setting the caller.

    Example:
        with user_context(CurrentUser(id=admin_id, role="admin")):
            ticket_service.assign(ticket_id, support_id)
    """
    previous = _current_user.get()
    set_current_user(user)
    try:
        yield
    finally:
        if previous is None:
            clear_current_user()
        else:
            set_current_user(previous)
