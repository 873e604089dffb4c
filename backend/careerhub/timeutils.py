"""
Time helpers shared by the data access layer and the admin console.

All timestamps handed to the store are naive UTC datetimes, which is what
SQLite's DATETIME columns round-trip without conversion.
"""

from datetime import date, datetime, time, timezone
from typing import Callable, Optional, Union

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_store_timestamp(value: Union[date, datetime]) -> datetime:
    """
    Convert a user-supplied date or datetime into a store timestamp.

    Plain dates become midnight UTC. Aware datetimes are converted to UTC
    and stripped of their tzinfo; naive datetimes are taken as UTC already.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    return datetime.combine(value, time.min)


def format_date(value: Optional[datetime]) -> str:
    if value is None:
        return "N/A"
    return f"{value:%B} {value.day}, {value.year}"


def relative_time(value: Optional[datetime], now: Optional[datetime] = None) -> str:
    """
    Human readable distance from ``value`` to ``now``.

    Examples: "just now", "5 minutes ago", "yesterday", "3 days ago".
    Anything older than a week falls back to the long date format.
    """
    if value is None:
        return "N/A"

    now = now or utcnow()
    seconds = int((now - value).total_seconds())

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        minutes = seconds // 60
        return f"{minutes} minute{'s' if minutes > 1 else ''} ago"
    if seconds < 86400:
        hours = seconds // 3600
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    if seconds < 172800:
        return "yesterday"
    if seconds < 604800:
        days = seconds // 86400
        return f"{days} day{'s' if days > 1 else ''} ago"
    return format_date(value)
