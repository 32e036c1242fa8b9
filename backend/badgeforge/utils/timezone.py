"""Timezone utilities for BadgeForge.

All timestamps are stored and compared in UTC. SQLite drops tzinfo on the way
back out, so anything read from the database goes through ``ensure_utc``.
"""

from datetime import UTC, datetime


def get_now() -> datetime:
    """
    Get the current time as a timezone-aware UTC datetime.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """
    Normalize a datetime to UTC.

    Args:
        dt: Datetime to convert (naive values are assumed to already be UTC)

    Returns:
        Timezone-aware datetime in UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
