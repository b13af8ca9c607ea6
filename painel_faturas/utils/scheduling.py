"""Scheduling utilities for Painel de Faturas.

Helpers for calculating fire times of scheduled dispatches.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

DAILY_PERIOD = timedelta(days=1)

MAX_BATCH_COUNT = 20
MIN_INTERVAL_MINUTES = 2
MAX_INTERVAL_MINUTES = 10
DEFAULT_INTERVAL_MINUTES = 3


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO timestamp returned by PostgREST into an aware UTC datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    return ensure_utc(datetime.fromisoformat(value))


def calculate_next_daily_run(previous_scheduled_time: datetime) -> datetime:
    """Next fire time of a daily dispatch.

    Always counted from the previous scheduled time, never from now, so the
    time of day is preserved even when a cycle runs late.

    Example:
        >>> calculate_next_daily_run(datetime(2025, 3, 10, 8, 30, tzinfo=timezone.utc))
        datetime.datetime(2025, 3, 11, 8, 30, tzinfo=datetime.timezone.utc)
    """
    return previous_scheduled_time + DAILY_PERIOD


def calculate_batch_times(
    base_time: datetime,
    count: int = 1,
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
) -> List[datetime]:
    """Fire times for a batch of copies of one dispatch.

    Args:
        base_time: Fire time of the first copy
        count: Number of copies (1-20)
        interval_minutes: Gap between consecutive copies (2-10)

    Returns:
        List of fire times: base, base+interval, base+2*interval, ...

    Raises:
        ValueError: If count or interval is out of range
    """
    if not 1 <= count <= MAX_BATCH_COUNT:
        raise ValueError(f"Invalid count: {count}. Must be between 1 and {MAX_BATCH_COUNT}")
    if not MIN_INTERVAL_MINUTES <= interval_minutes <= MAX_INTERVAL_MINUTES:
        raise ValueError(
            f"Invalid interval_minutes: {interval_minutes}. "
            f"Must be between {MIN_INTERVAL_MINUTES} and {MAX_INTERVAL_MINUTES}"
        )

    step = timedelta(minutes=interval_minutes)
    return [base_time + step * i for i in range(count)]
