# backend/studio_booking/schemas/booking_settings.py
"""
Booking rule schemas.

BookingSettings is the immutable value object handed to the availability
calculator and the booking service. BookingSettingsUpdate is the admin
payload, validated against the admin-editable bounds.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.constants import (
    DEFAULT_ADVANCE_BOOKING_DAYS,
    DEFAULT_BOOKING_BUFFER,
    DEFAULT_CLOSE_TIME,
    DEFAULT_MAX_BOOKING_DURATION,
    DEFAULT_MIN_BOOKING_DURATION,
    DEFAULT_OPEN_TIME,
    MAX_ADVANCE_DAYS,
    MAX_BUFFER_MINUTES,
    MAX_DURATION_HOURS,
    MIN_ADVANCE_DAYS,
    MIN_DURATION_HOURS,
)
from ..utils.time_utils import time_to_minutes
from ._strict_base import StrictModel, StrictRequestModel, TimeOfDay


class BookingSettings(BaseModel):
    """Booking rules in effect for one request."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    min_booking_duration: float = Field(default=DEFAULT_MIN_BOOKING_DURATION, gt=0)
    max_booking_duration: float = Field(default=DEFAULT_MAX_BOOKING_DURATION, gt=0)
    booking_buffer: int = Field(default=DEFAULT_BOOKING_BUFFER, ge=0)
    advance_booking_days: int = Field(default=DEFAULT_ADVANCE_BOOKING_DAYS, ge=0)
    default_open_time: TimeOfDay = Field(default=DEFAULT_OPEN_TIME, validate_default=True)
    default_close_time: TimeOfDay = Field(default=DEFAULT_CLOSE_TIME, validate_default=True)

    @model_validator(mode="after")
    def _check_ranges(self) -> "BookingSettings":
        if self.min_booking_duration > self.max_booking_duration:
            raise ValueError("min_booking_duration cannot exceed max_booking_duration")
        return self

    @property
    def min_duration_minutes(self) -> int:
        return int(round(self.min_booking_duration * 60))

    @property
    def max_duration_minutes(self) -> int:
        return int(round(self.max_booking_duration * 60))

    @property
    def open_minutes(self) -> int:
        return time_to_minutes(self.default_open_time)

    @property
    def close_minutes(self) -> int:
        return time_to_minutes(self.default_close_time)

    def for_studio(self, studio: Any) -> "BookingSettings":
        """Rules with the studio's own opening hours applied, where it has them."""
        updates = {}
        if getattr(studio, "open_time", None) is not None:
            updates["default_open_time"] = studio.open_time
        if getattr(studio, "close_time", None) is not None:
            updates["default_close_time"] = studio.close_time
        return self.model_copy(update=updates) if updates else self


class BookingSettingsUpdate(StrictRequestModel):
    """Partial update of booking rules (admin only)."""

    min_booking_duration: Optional[float] = Field(
        default=None, ge=MIN_DURATION_HOURS, le=MAX_DURATION_HOURS
    )
    max_booking_duration: Optional[float] = Field(
        default=None, ge=MIN_DURATION_HOURS, le=MAX_DURATION_HOURS
    )
    booking_buffer: Optional[int] = Field(default=None, ge=0, le=MAX_BUFFER_MINUTES)
    advance_booking_days: Optional[int] = Field(
        default=None, ge=MIN_ADVANCE_DAYS, le=MAX_ADVANCE_DAYS
    )
    default_open_time: Optional[TimeOfDay] = None
    default_close_time: Optional[TimeOfDay] = None

    @model_validator(mode="after")
    def _check_pairs(self) -> "BookingSettingsUpdate":
        if (
            self.min_booking_duration is not None
            and self.max_booking_duration is not None
            and self.min_booking_duration > self.max_booking_duration
        ):
            raise ValueError("min_booking_duration cannot exceed max_booking_duration")
        if (
            self.default_open_time is not None
            and self.default_close_time is not None
            and self.default_open_time >= self.default_close_time
        ):
            raise ValueError("default_open_time must be before default_close_time")
        return self


class BookingSettingsResponse(StrictModel):
    settings: BookingSettings
    updated_at: Optional[datetime] = None
