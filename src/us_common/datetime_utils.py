"""UTC date/time helpers."""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Calendar date in UTC, used by the "not in the future" checks."""
    return utc_now().date()
