# backend/studio_booking/models/booking.py
"""
Booking model for the studio booking service.

A booking reserves a half-open [start_time, end_time) interval of one
studio on one date. Only CONFIRMED bookings occupy their interval;
for a given studio and date, confirmed bookings never overlap.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
import logging
from typing import Any, Optional, cast

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
)
from sqlalchemy.sql import func
import ulid

from ..database import Base

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"  # Never produced by the current flow
    CONFIRMED = "confirmed"  # Default - instant booking, occupies its slot
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


# Statuses that block their interval for other bookings
OCCUPYING_STATUSES = frozenset({BookingStatus.CONFIRMED.value})

# Statuses that can no longer be edited or cancelled
FINAL_STATUSES = frozenset(
    {
        BookingStatus.CANCELLED.value,
        BookingStatus.COMPLETED.value,
        BookingStatus.NO_SHOW.value,
    }
)


class Booking(Base):
    """Self-contained booking record for one studio, one date and one interval."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    studio = Column(String(100), ForeignKey("studios.name"), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    status = Column(
        String(20), nullable=False, default=BookingStatus.CONFIRMED.value, index=True
    )

    # Customer contact info
    phone_number = Column(String(10), nullable=False, index=True)
    name = Column(String(200), nullable=True)
    email = Column(String(255), nullable=True)

    # Session metadata
    session_type = Column(String(100), nullable=True)
    session_details = Column(Text, nullable=True)
    group_size = Column(Integer, nullable=True)
    total_amount = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    created_by_role = Column(String(20), nullable=False, default="customer")

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed', 'no_show')",
            name="ck_bookings_status",
        ),
        CheckConstraint("end_time > start_time", name="ck_bookings_time_order"),
        CheckConstraint("total_amount IS NULL OR total_amount >= 0", name="ck_bookings_amount"),
        Index("ix_bookings_studio_date_status", "studio", "date", "status"),
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<Booking {self.id}: studio={self.studio}, date={self.date}, "
            f"time={self.start_time}-{self.end_time}, status={self.status}>"
        )

    def cancel(self, reason: Optional[str] = None) -> None:
        """Cancel this booking, freeing its interval."""
        self.status = BookingStatus.CANCELLED.value
        self.cancelled_at = datetime.now(timezone.utc)
        self.cancellation_reason = reason
        logger.info(f"Booking {self.id} cancelled")

    @property
    def is_occupying(self) -> bool:
        return self.status in OCCUPYING_STATUSES

    @property
    def is_modifiable(self) -> bool:
        """Cancelled, completed and no-show bookings are final."""
        return self.status not in FINAL_STATUSES

    def is_past(self, studio_today: date) -> bool:
        """
        Check if booking date has passed.

        Args:
            studio_today: Today's date in the studio timezone
        """
        return cast(date, self.date) < studio_today

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for events and logging."""
        return {
            "id": self.id,
            "studio": self.studio,
            "date": self.date.isoformat() if self.date else None,
            "start_time": self.start_time.strftime("%H:%M") if self.start_time else None,
            "end_time": self.end_time.strftime("%H:%M") if self.end_time else None,
            "status": self.status,
            "phone_number": self.phone_number,
            "name": self.name,
            "email": self.email,
            "session_type": self.session_type,
            "session_details": self.session_details,
            "group_size": self.group_size,
            "total_amount": self.total_amount,
            "notes": self.notes,
            "created_by_role": self.created_by_role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "confirmed_at": self.confirmed_at.isoformat() if self.confirmed_at else None,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
        }
