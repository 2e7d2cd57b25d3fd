"""Datetime utility functions for timezone handling."""
from datetime import datetime, UTC
from typing import Optional


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure datetime is timezone-aware in UTC.

    SQLite returns naive datetimes even for timezone-aware columns; those are
    treated as UTC.

    Example:
        >>> ensure_utc(datetime(2025, 1, 1, 12, 0, 0)).tzinfo == UTC
        True

        >>> ensure_utc(None) is None
        True
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def start_of_day_utc(now: Optional[datetime] = None) -> datetime:
    """Midnight (UTC) of the day containing ``now``."""
    now = ensure_utc(now) or datetime.now(UTC)
    return now.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)


def elapsed_whole_seconds(start: Optional[datetime], end: datetime) -> Optional[int]:
    """Whole seconds between two instants, or None when ``start`` is unknown."""
    if start is None:
        return None
    delta = ensure_utc(end) - ensure_utc(start)
    return max(0, int(delta.total_seconds()))
