# backend/studio_booking/services/availability_calculator.py
"""
Availability calculator.

Pure functions that turn operating hours, blocked windows and existing
bookings into a fixed-granularity slot grid for one studio and date.
Nothing here touches the database or the clock: every input is an
argument, so the same inputs always produce the same grid.

All comparisons happen in minutes since midnight on half-open intervals.
[a, b) and [c, d) overlap iff a < d and b > c; touching intervals do not
overlap.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
import logging
from typing import Any, Collection, Iterable, List, Optional, Protocol, Sequence, Tuple

from ..core.exceptions import OutOfWindowException
from ..models.booking import OCCUPYING_STATUSES
from ..schemas.booking_settings import BookingSettings
from ..utils.time_utils import format_time, minutes_to_time, time_to_minutes

logger = logging.getLogger(__name__)

SLOT_REASON_BLOCKED = "blocked"
SLOT_REASON_BOOKED = "booked"
SLOT_REASON_PAST = "past"


class TimeWindow(Protocol):
    start_time: time
    end_time: time


class BookedInterval(Protocol):
    start_time: time
    end_time: time
    status: Any


@dataclass(frozen=True)
class Slot:
    """One grid cell. ``reason`` is set only when the slot is unavailable."""

    start_time: time
    end_time: time
    available: bool
    reason: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_time": format_time(self.start_time),
            "end_time": format_time(self.end_time),
            "available": self.available,
            "reason": self.reason,
        }


def intervals_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open interval overlap test on minutes since midnight."""
    return a_start < b_end and a_end > b_start


def _status_value(status: Any) -> str:
    return str(getattr(status, "value", status))


def generate_grid(
    open_minutes: int, close_minutes: int, granularity_minutes: int
) -> List[Tuple[int, int]]:
    """
    Build consecutive [start, end) minute pairs from open to close.

    A trailing interval shorter than the granularity is dropped. A close time
    at or before the open time yields an empty grid.
    """
    if granularity_minutes <= 0:
        raise ValueError(f"granularity_minutes must be positive, got {granularity_minutes}")

    grid: List[Tuple[int, int]] = []
    start = open_minutes
    while start + granularity_minutes <= close_minutes:
        grid.append((start, start + granularity_minutes))
        start += granularity_minutes
    return grid


def find_window_conflicts(
    start_minutes: int, end_minutes: int, windows: Iterable[TimeWindow]
) -> List[TimeWindow]:
    """Blocked windows overlapping [start, end)."""
    return [
        window
        for window in windows
        if intervals_overlap(
            start_minutes,
            end_minutes,
            time_to_minutes(window.start_time),
            time_to_minutes(window.end_time),
        )
    ]


def find_booking_conflicts(
    start_minutes: int,
    end_minutes: int,
    bookings: Iterable[BookedInterval],
    *,
    buffer_minutes: int = 0,
    occupying_statuses: Collection[str] = OCCUPYING_STATUSES,
    exclude_booking_id: Optional[str] = None,
) -> List[BookedInterval]:
    """
    Occupying bookings overlapping [start, end).

    Each booking is widened by ``buffer_minutes`` on both ends before the
    test; the candidate interval itself is not widened.
    """
    occupying = {_status_value(s) for s in occupying_statuses}
    conflicts: List[BookedInterval] = []
    for booking in bookings:
        if _status_value(booking.status) not in occupying:
            continue
        if exclude_booking_id is not None and getattr(booking, "id", None) == exclude_booking_id:
            continue
        booked_start = time_to_minutes(booking.start_time) - buffer_minutes
        booked_end = time_to_minutes(booking.end_time) + buffer_minutes
        if intervals_overlap(start_minutes, end_minutes, booked_start, booked_end):
            conflicts.append(booking)
    return conflicts


def latest_bookable_date(today: date, settings: BookingSettings) -> date:
    return today + timedelta(days=settings.advance_booking_days)


def ensure_within_advance_window(
    booking_date: date, today: date, settings: BookingSettings
) -> None:
    """
    Raise out_of_window when ``booking_date`` lies beyond the advance window.

    Raises:
        OutOfWindowException: If booking_date > today + advance_booking_days
    """
    last_date = latest_bookable_date(today, settings)
    if booking_date > last_date:
        raise OutOfWindowException(
            f"Bookings can only be made up to {settings.advance_booking_days} days in advance",
            details={
                "date": booking_date.isoformat(),
                "latest_bookable_date": last_date.isoformat(),
                "advance_booking_days": settings.advance_booking_days,
            },
        )


def compute_slots(
    studio: str,
    booking_date: date,
    settings: BookingSettings,
    blocked_windows: Sequence[TimeWindow],
    existing_bookings: Sequence[BookedInterval],
    now: datetime,
    granularity_minutes: int = 60,
    allow_past_slots: bool = False,
    occupying_statuses: Collection[str] = OCCUPYING_STATUSES,
) -> List[Slot]:
    """
    Compute the full slot grid of a studio on a date.

    Args:
        studio: Studio name, used only for logging
        booking_date: Date the grid is computed for
        settings: Booking rules in effect (hours, buffer, advance window)
        blocked_windows: Windows for this studio and date
        existing_bookings: Bookings for this studio and date (any status)
        now: Current time in the studio timezone
        granularity_minutes: Width of each slot
        allow_past_slots: Keep elapsed slots available (privileged callers)
        occupying_statuses: Booking statuses that block a slot

    Returns:
        Every grid slot in ascending order, flagged available or not.
        Slots are never dropped.

    Raises:
        OutOfWindowException: If booking_date is beyond the advance window
        ValueError: If granularity_minutes is not positive
    """
    today = now.date()
    ensure_within_advance_window(booking_date, today, settings)

    grid = generate_grid(settings.open_minutes, settings.close_minutes, granularity_minutes)
    now_minutes = now.hour * 60 + now.minute

    slots: List[Slot] = []
    for start, end in grid:
        reason: Optional[str] = None
        if find_window_conflicts(start, end, blocked_windows):
            reason = SLOT_REASON_BLOCKED
        elif find_booking_conflicts(
            start,
            end,
            existing_bookings,
            buffer_minutes=settings.booking_buffer,
            occupying_statuses=occupying_statuses,
        ):
            reason = SLOT_REASON_BOOKED
        elif not allow_past_slots and (
            booking_date < today or (booking_date == today and end <= now_minutes)
        ):
            reason = SLOT_REASON_PAST

        slots.append(
            Slot(
                start_time=minutes_to_time(start),
                end_time=minutes_to_time(end),
                available=reason is None,
                reason=reason,
            )
        )

    logger.debug(
        "Computed %d slots for %s on %s (%d available)",
        len(slots),
        studio,
        booking_date.isoformat(),
        sum(1 for slot in slots if slot.available),
    )
    return slots