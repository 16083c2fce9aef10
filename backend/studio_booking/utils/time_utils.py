from __future__ import annotations

from datetime import time
import re
from typing import Union

_HHMM_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$")

MINUTES_PER_DAY = 24 * 60


def time_to_minutes(t: time) -> int:
    """
    Convert time to minutes since midnight.

    Seconds are ignored; the service works at minute resolution.
    """
    return t.hour * 60 + t.minute


def minutes_to_time(minutes: int) -> time:
    """Convert minutes since midnight (0-1439) to a time object."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"minutes out of range: {minutes}")
    return time(minutes // 60, minutes % 60)


def parse_time_of_day(value: Union[str, time]) -> time:
    """
    Parse "HH:MM" or "HH:MM:SS" into a time at minute resolution.

    Raises:
        ValueError: If the value is not a valid 24h time of day
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if not isinstance(value, str):
        raise ValueError(f"Invalid time value: {value!r}")
    match = _HHMM_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time format (expected HH:MM): {value!r}")
    return time(int(match.group(1)), int(match.group(2)))


def format_time(t: time) -> str:
    """Render a time as HH:MM."""
    return t.strftime("%H:%M")
