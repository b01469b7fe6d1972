"""UTC-everywhere time handling. Local time only at display boundaries (emails)."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

# Merchants and support staff are all in India
DISPLAY_TIMEZONE = "Asia/Kolkata"


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    Raises ValueError if datetime is naive (no timezone).
    """
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot convert naive datetime to UTC. Datetime must be timezone-aware."
        )
    return dt.astimezone(timezone.utc)


def to_local(dt: datetime, tz_name: str = DISPLAY_TIMEZONE) -> datetime:
    """
    Convert UTC datetime to local timezone for display.

    ONLY use this when rendering for humans (email bodies).

    Raises:
        ValueError: If datetime is naive or timezone name is invalid
    """
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot convert naive datetime. Datetime must be timezone-aware."
        )

    try:
        local_tz = ZoneInfo(tz_name)
    except KeyError:
        raise ValueError(f"Unknown timezone: {tz_name}")

    return dt.astimezone(local_tz)


def format_display(dt: datetime, tz_name: str = DISPLAY_TIMEZONE) -> str:
    """Human-readable local timestamp, e.g. '05 Mar 2025, 02:30 PM IST'."""
    local = to_local(dt, tz_name)
    return local.strftime("%d %b %Y, %I:%M %p %Z")
