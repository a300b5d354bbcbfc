"""
UTC time helpers.

Domain code works with timezone-aware UTC datetimes; the database stores
naive UTC (SQLite drops tzinfo anyway).
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Interpret naive values as UTC, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_db(value: datetime) -> datetime:
    """Naive UTC datetime for storage."""
    return as_utc(value).replace(tzinfo=None)


def parse_iso(value: str) -> datetime:
    """Parse ISO-8601 (including a trailing Z) into an aware UTC datetime."""
    return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
