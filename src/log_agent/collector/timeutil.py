"""Calendar-day helpers shared by rotation and retention.

Day boundaries are computed with a fixed UTC offset so that the tailer agrees
with the log writer on which physical file is "today's".
"""

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone

SECONDS_PER_DAY = 24 * 60 * 60


def fetch_time_offset() -> int:
    """Return the process-local offset from UTC in seconds (east positive)."""
    return time.localtime().tm_gmtoff


def day_number(timestamp: float, time_offset: int) -> int:
    """Index of the calendar day containing ``timestamp`` under ``time_offset``."""
    return int((int(timestamp) + time_offset) // SECONDS_PER_DAY)


def same_day(src: float, target: float, time_offset: int) -> bool:
    """Check whether two Unix timestamps fall on the same calendar day."""
    return day_number(src, time_offset) == day_number(target, time_offset)


def format_time(fmt: str, timestamp: float, time_offset: int) -> str:
    """Format a Unix timestamp with strftime in the given fixed offset."""
    tz = timezone(timedelta(seconds=time_offset))
    return datetime.fromtimestamp(int(timestamp), tz=tz).strftime(fmt)
