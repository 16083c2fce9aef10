"""Blocked window schemas (admin)."""

import datetime as dt
from typing import List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from ..core.constants import MAX_BULK_BLOCK_DATES, MAX_REASON_LENGTH
from ._strict_base import StandardizedModel, StrictRequestModel, TimeOfDay

# Why a requested date was not blocked by a bulk request
SkipReason = Literal["past", "booked", "already_blocked"]


class _WindowTimes(StrictRequestModel):
    start_time: TimeOfDay
    end_time: TimeOfDay
    reason: Optional[str] = Field(default=None, max_length=MAX_REASON_LENGTH)

    @model_validator(mode="after")
    def _check_order(self) -> "_WindowTimes":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class BlockedWindowCreate(_WindowTimes):
    studio: str = Field(min_length=1, max_length=100)
    date: dt.date


class BlockedWindowBulkCreate(_WindowTimes):
    """One window blocked on every listed date."""

    studio: str = Field(min_length=1, max_length=100)
    dates: List[dt.date] = Field(min_length=1, max_length=MAX_BULK_BLOCK_DATES)

    @field_validator("dates")
    @classmethod
    def _unique_sorted(cls, v: List[dt.date]) -> List[dt.date]:
        return sorted(set(v))


class BlockedWindowResponse(StandardizedModel):
    id: str
    studio: str
    date: dt.date
    start_time: TimeOfDay
    end_time: TimeOfDay
    reason: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[dt.datetime] = None


class SkippedDate(StandardizedModel):
    date: dt.date
    reason: SkipReason


class BlockedWindowBulkResponse(StandardizedModel):
    created: List[BlockedWindowResponse]
    skipped: List[SkippedDate]
