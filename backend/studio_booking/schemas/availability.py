"""Availability grid schemas."""

import datetime as dt
from typing import List, Literal, Optional

from pydantic import Field

from ._strict_base import StandardizedModel, TimeOfDay


class SlotResponse(StandardizedModel):
    start_time: TimeOfDay
    end_time: TimeOfDay
    available: bool
    reason: Optional[Literal["blocked", "booked", "past"]] = None


class AvailabilityResponse(StandardizedModel):
    studio: str
    date: dt.date
    granularity_minutes: int
    open_time: TimeOfDay
    close_time: TimeOfDay
    booking_buffer: int = Field(description="Minutes kept free around every booking")
    slots: List[SlotResponse]

    @property
    def available_count(self) -> int:
        return sum(1 for slot in self.slots if slot.available)
