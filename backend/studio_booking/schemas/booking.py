# backend/studio_booking/schemas/booking.py
"""
Booking request/response schemas.

Dates are ISO ``YYYY-MM-DD`` and times are ``HH:MM`` (24h). Interval
rules (end after start, duration limits, operating hours) are enforced by
BookingService so that they surface with stable error codes, not here.
"""

import datetime as dt
import re
from typing import Any, Dict, Optional

from pydantic import Field, field_validator, model_validator

from ..core.constants import (
    DEFAULT_COUNTRY_CODE,
    MAX_NOTES_LENGTH,
    MAX_REASON_LENGTH,
    PHONE_DIGITS,
)
from ..models.booking import BookingStatus
from ._strict_base import StandardizedModel, StrictRequestModel, TimeOfDay

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_phone_number(value: Any) -> str:
    """
    Reduce a phone number to its 10 national digits.

    Accepts separators and an optional leading country code or trunk zero.
    """
    if value is None:
        raise ValueError("Phone number is required")
    digits = re.sub(r"\D", "", str(value))
    if len(digits) == PHONE_DIGITS + len(DEFAULT_COUNTRY_CODE) and digits.startswith(
        DEFAULT_COUNTRY_CODE
    ):
        digits = digits[len(DEFAULT_COUNTRY_CODE) :]
    elif len(digits) == PHONE_DIGITS + 1 and digits.startswith("0"):
        digits = digits[1:]
    if len(digits) != PHONE_DIGITS:
        raise ValueError(f"Phone number must be exactly {PHONE_DIGITS} digits")
    return digits


def _normalize_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip().lower()
    if not cleaned:
        return None
    if not _EMAIL_RE.match(cleaned):
        raise ValueError("Invalid email address")
    return cleaned


class CustomerInfo(StrictRequestModel):
    """Contact details of the person the booking is for."""

    phone_number: str
    name: Optional[str] = Field(default=None, max_length=200)
    email: Optional[str] = Field(default=None, max_length=255)

    @field_validator("phone_number", mode="before")
    @classmethod
    def _phone(cls, v: Any) -> str:
        return normalize_phone_number(v)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v)


class BookingMetadata(StrictRequestModel):
    """Free-form session details carried on the booking."""

    session_type: Optional[str] = Field(default=None, max_length=100)
    session_details: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)
    group_size: Optional[int] = Field(default=None, ge=1)
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)


class BookingCreate(StrictRequestModel):
    """
    Create a booking.

    ``skip_validation`` and ``allow_past_slots`` are honored only for
    staff/admin callers.
    """

    studio: str = Field(min_length=1, max_length=100)
    date: dt.date
    start_time: TimeOfDay
    end_time: TimeOfDay

    phone_number: str
    name: Optional[str] = Field(default=None, max_length=200)
    email: Optional[str] = Field(default=None, max_length=255)

    session_type: Optional[str] = Field(default=None, max_length=100)
    session_details: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)
    group_size: Optional[int] = Field(default=None, ge=1)
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)

    skip_validation: bool = False
    allow_past_slots: bool = False

    @field_validator("phone_number", mode="before")
    @classmethod
    def _phone(cls, v: Any) -> str:
        return normalize_phone_number(v)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v)

    def customer_info(self) -> CustomerInfo:
        return CustomerInfo(phone_number=self.phone_number, name=self.name, email=self.email)

    def booking_metadata(self) -> BookingMetadata:
        return BookingMetadata(
            session_type=self.session_type,
            session_details=self.session_details,
            group_size=self.group_size,
            notes=self.notes,
        )


SCHEDULE_FIELDS = ("studio", "date", "start_time", "end_time")


class BookingUpdate(StrictRequestModel):
    """Partial update; omitted fields keep their current value."""

    studio: Optional[str] = Field(default=None, min_length=1, max_length=100)
    date: Optional[dt.date] = None
    start_time: Optional[TimeOfDay] = None
    end_time: Optional[TimeOfDay] = None

    name: Optional[str] = Field(default=None, max_length=200)
    email: Optional[str] = Field(default=None, max_length=255)
    session_type: Optional[str] = Field(default=None, max_length=100)
    session_details: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)
    group_size: Optional[int] = Field(default=None, ge=1)
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)

    skip_validation: bool = False
    allow_past_slots: bool = False

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v)

    @model_validator(mode="after")
    def _schedule_not_null(self) -> "BookingUpdate":
        # Omit a schedule field to keep it; null cannot clear it
        cleared = [
            name
            for name in SCHEDULE_FIELDS
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        return self

    def changes(self) -> Dict[str, Any]:
        """Fields explicitly provided by the caller, minus the control flags."""
        return self.model_dump(
            exclude_unset=True, exclude={"skip_validation", "allow_past_slots"}
        )

    @property
    def touches_schedule(self) -> bool:
        return bool(set(SCHEDULE_FIELDS) & self.model_fields_set)


class BookingCancelRequest(StrictRequestModel):
    reason: Optional[str] = Field(default=None, max_length=MAX_REASON_LENGTH)
    # Customers must prove ownership with the phone number on the booking
    phone_number: Optional[str] = None

    @field_validator("phone_number", mode="before")
    @classmethod
    def _phone(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return normalize_phone_number(v)


class BookingResponse(StandardizedModel):
    id: str
    studio: str
    date: dt.date
    start_time: TimeOfDay
    end_time: TimeOfDay
    status: BookingStatus
    phone_number: str
    name: Optional[str] = None
    email: Optional[str] = None
    session_type: Optional[str] = None
    session_details: Optional[str] = None
    group_size: Optional[int] = None
    total_amount: Optional[int] = None
    notes: Optional[str] = None
    created_by_role: str
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    confirmed_at: Optional[dt.datetime] = None
    cancelled_at: Optional[dt.datetime] = None
    cancellation_reason: Optional[str] = None
