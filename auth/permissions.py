"""Role checks used at the top of route handlers."""

from auth.exceptions import PermissionDeniedError
from utils.user_context import CurrentUser, get_current_user


def require_roles(*roles: str) -> CurrentUser:
    """Return the caller if their role is one of `roles`.

    Raises:
        PermissionDeniedError: If the caller's role is not allowed.
    """
    user = get_current_user()
    if not user.has_role(*roles):
        raise PermissionDeniedError(f"Role '{user.role}' is not allowed to perform this action")
    return user
