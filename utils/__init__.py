"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, to_utc, to_local, format_display
from utils.user_context import (
    CurrentUser,
    get_current_user,
    get_current_user_id,
    get_current_user_or_none,
    set_current_user,
    clear_current_user,
    user_context,
)
