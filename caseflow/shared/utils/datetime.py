"""Timezone handling shared by the engine.

Every timestamp the engine stores or compares is an aware UTC datetime.
"""

from datetime import UTC, datetime, timedelta

_HOUR = timedelta(hours=1)


def utc_now() -> datetime:
    """Aware UTC "now"; the default clock for every service."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Normalize a value read back from the database to aware UTC.

    SQLite drops tzinfo even on ``DateTime(timezone=True)`` columns, so a
    naive value is taken to already be UTC. None passes through.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def hours_between(start: datetime, end: datetime) -> float:
    """Fractional hours from ``start`` to ``end`` (negative if end is earlier)."""
    return (_as_utc(end) - _as_utc(start)) / _HOUR


def _as_utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)
