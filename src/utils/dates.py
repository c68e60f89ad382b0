"""
Calendar-day helpers.

All day boundaries use the local clock of the running process.
"""

import time
from datetime import date, datetime
from typing import Callable, Optional

Clock = Callable[[], date]


def calendar_day(clock: Clock = date.today) -> str:
    """Current calendar day as ISO string (YYYY-MM-DD)."""
    return clock().isoformat()


def now_ms() -> int:
    """Current epoch time in milliseconds."""
    return int(time.time() * 1000)


def timestamp_to_day(timestamp_ms: int) -> date:
    """Truncate an epoch-milliseconds timestamp to its local calendar day."""
    return datetime.fromtimestamp(timestamp_ms / 1000).date()


def in_day_range(
    timestamp_ms: int,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> bool:
    """Inclusive [start, end] day-range check; open bounds match everything."""
    day = timestamp_to_day(timestamp_ms)
    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True
