"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def seconds_until(target: datetime, now: datetime) -> int:
    """Whole seconds from ``now`` until ``target``, floored, never negative."""
    remaining = int((target - now).total_seconds())
    return max(remaining, 0)
