"""Helpers for working with timezone-aware datetimes."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""

    return datetime.now(tz=timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Normalize ``value`` to an aware UTC datetime.

    SQLite drops ``tzinfo`` on ``DateTime(timezone=True)`` columns, so naive values
    read back from the database are assumed to already be expressed in UTC.
    """

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def epoch_millis_to_datetime(value: int | float | None) -> datetime | None:
    """Convert a browser style millisecond timestamp into a UTC datetime."""

    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
