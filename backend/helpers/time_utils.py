"""
Datetime helpers.

SQLite hands back naive datetimes, PostgreSQL aware ones. Everything stored
by this API is UTC, so naive values are read as UTC.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Return dt as an aware UTC datetime.

    Args:
        dt: Naive (assumed UTC) or aware datetime

    Returns:
        The same instant with tzinfo=UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_db_datetime(dt: datetime) -> datetime:
    """
    Normalise a datetime for storage and SQL comparison.

    Columns are plain DateTime (no timezone), so values are stored as naive
    UTC. Aware inputs in another zone are converted first.
    """
    return ensure_utc(dt).replace(tzinfo=None)
