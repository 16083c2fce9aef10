"""Application-wide constants for the studio booking service."""

from __future__ import annotations

from typing import Any, Dict, List

# Booking settings defaults, used when a key is missing from booking_settings
DEFAULT_MIN_BOOKING_DURATION = 1  # hours
DEFAULT_MAX_BOOKING_DURATION = 8  # hours
DEFAULT_BOOKING_BUFFER = 0  # minutes
DEFAULT_ADVANCE_BOOKING_DAYS = 30
DEFAULT_OPEN_TIME = "08:00"
DEFAULT_CLOSE_TIME = "22:00"

BOOKING_SETTINGS_DEFAULTS: Dict[str, Any] = {
    "min_booking_duration": DEFAULT_MIN_BOOKING_DURATION,
    "max_booking_duration": DEFAULT_MAX_BOOKING_DURATION,
    "booking_buffer": DEFAULT_BOOKING_BUFFER,
    "advance_booking_days": DEFAULT_ADVANCE_BOOKING_DAYS,
    "default_open_time": DEFAULT_OPEN_TIME,
    "default_close_time": DEFAULT_CLOSE_TIME,
}

# Admin-editable bounds
MIN_DURATION_HOURS = 1
MAX_DURATION_HOURS = 24
MAX_BUFFER_MINUTES = 120
MIN_ADVANCE_DAYS = 1
MAX_ADVANCE_DAYS = 365

# Phone numbers are stored as 10 national digits
PHONE_DIGITS = 10
DEFAULT_COUNTRY_CODE = "91"

DEFAULT_SESSION_TYPE = "Walk-in"
MAX_NOTES_LENGTH = 1000
MAX_REASON_LENGTH = 255
MAX_BULK_BLOCK_DATES = 90

# Seeded studio catalog
DEFAULT_STUDIOS: List[Dict[str, Any]] = [
    {
        "name": "Studio A",
        "studio_type": "Recording Studio",
        "capacity": 30,
        "hourly_rate": 500,
    },
    {
        "name": "Studio B",
        "studio_type": "Mixing Suite",
        "capacity": 12,
        "hourly_rate": 400,
    },
    {
        "name": "Studio C",
        "studio_type": "Podcast Room",
        "capacity": 5,
        "hourly_rate": 300,
    },
]

SERVICE_NAME = "studio-booking-api"
API_VERSION = "1.0.0"
