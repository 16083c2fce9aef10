"""
Timezone utilities for the studio booking service.

All studios operate in a single configured timezone; "today" and "now"
are always evaluated there, never in server or client time.
"""

from datetime import date, datetime
from typing import Optional

import pytz

from .config import settings


def get_studio_timezone(tz_name: Optional[str] = None) -> pytz.BaseTzInfo:
    """
    Get the studio timezone.

    Args:
        tz_name: Optional override, defaults to settings.studio_timezone

    Returns:
        pytz timezone object
    """
    return pytz.timezone(tz_name or settings.studio_timezone)


def get_studio_now(tz_name: Optional[str] = None) -> datetime:
    """Get the current datetime in the studio timezone."""
    return datetime.now(get_studio_timezone(tz_name))


def get_studio_today(tz_name: Optional[str] = None) -> date:
    """Get 'today' in the studio timezone."""
    return get_studio_now(tz_name).date()


def to_studio_time(dt: datetime, tz_name: Optional[str] = None) -> datetime:
    """
    Convert a datetime to the studio timezone.

    Naive datetimes are assumed to be UTC.
    """
    if dt.tzinfo is None:
        dt = pytz.UTC.localize(dt)
    return dt.astimezone(get_studio_timezone(tz_name))
