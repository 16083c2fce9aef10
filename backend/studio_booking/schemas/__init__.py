"""
Pydantic schemas for the studio booking API.
"""

from .availability import AvailabilityResponse, SlotResponse
from .blocked_window import (
    BlockedWindowBulkCreate,
    BlockedWindowBulkResponse,
    BlockedWindowCreate,
    BlockedWindowResponse,
    SkippedDate,
)
from .booking import (
    BookingCancelRequest,
    BookingCreate,
    BookingMetadata,
    BookingResponse,
    BookingUpdate,
    CustomerInfo,
)
from .booking_settings import BookingSettings, BookingSettingsResponse, BookingSettingsUpdate
from .studio import StudioResponse

__all__ = [
    "AvailabilityResponse",
    "BlockedWindowBulkCreate",
    "BlockedWindowBulkResponse",
    "BlockedWindowCreate",
    "BlockedWindowResponse",
    "BookingCancelRequest",
    "BookingCreate",
    "BookingMetadata",
    "BookingResponse",
    "BookingSettings",
    "BookingSettingsResponse",
    "BookingSettingsUpdate",
    "BookingUpdate",
    "CustomerInfo",
    "SkippedDate",
    "SlotResponse",
    "StudioResponse",
]
