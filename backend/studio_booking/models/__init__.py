"""
Database models for the studio booking service.

- Studio: bookable rooms (reference data)
- Booking: reservations of a studio interval
- BlockedWindow: intervals taken out of sale by an administrator
- BookingSetting: admin-editable booking rules stored as key/JSON rows
- StudioDayLock: per studio/date row used as the booking lock target
"""

from .blocked_window import BlockedWindow
from .booking import FINAL_STATUSES, OCCUPYING_STATUSES, Booking, BookingStatus
from .booking_setting import BookingSetting
from .studio import Studio
from .studio_day_lock import StudioDayLock

__all__ = [
    "BlockedWindow",
    "Booking",
    "BookingSetting",
    "BookingStatus",
    "FINAL_STATUSES",
    "OCCUPYING_STATUSES",
    "Studio",
    "StudioDayLock",
]
