# backend/studio_booking/services/blocked_window_service.py
"""
Blocked Window Service for the studio booking service.

Admins block studio time for maintenance or private use. A single block
never touches existing bookings; overlaps are logged so staff can follow
up. A bulk block repeats one window over many dates and leaves out the
dates it cannot take (elapsed, already booked, already blocked), reporting
each one back to the caller.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
import logging
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.exceptions import (
    ConflictException,
    NotFoundException,
    OutOfWindowException,
    ValidationException,
)
from ..core.timezone_utils import get_studio_now
from ..models.blocked_window import BlockedWindow
from ..repositories.factory import RepositoryFactory
from ..schemas.blocked_window import BlockedWindowBulkCreate, BlockedWindowCreate
from ..utils.time_utils import time_to_minutes
from .availability_calculator import find_booking_conflicts
from .base import BaseService

logger = logging.getLogger(__name__)

MAX_LIST_RANGE_DAYS = 366


@dataclass
class BulkBlockResult:
    created: List[BlockedWindow] = field(default_factory=list)
    skipped: List[Tuple[date, str]] = field(default_factory=list)


class BlockedWindowService(BaseService):
    """Create, list and delete blocked windows."""

    def __init__(
        self, db: Session, clock: Optional[Callable[[], datetime]] = None
    ) -> None:
        super().__init__(db)
        self.repository = RepositoryFactory.create_blocked_window_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.studio_repository = RepositoryFactory.create_studio_repository(db)
        self._clock = clock or get_studio_now

    @BaseService.measure_operation("create_blocked_window")
    def create_blocked_window(
        self, payload: BlockedWindowCreate, created_by: Optional[str] = None
    ) -> BlockedWindow:
        self._ensure_studio(payload.studio)

        existing = self.repository.find_exact(
            payload.studio, payload.date, payload.start_time, payload.end_time
        )
        if existing is not None:
            raise ConflictException(
                "This window is already blocked",
                code="blocked_window_exists",
                details={"id": existing.id},
            )

        with self.transaction():
            window = self.repository.create(
                studio=payload.studio,
                date=payload.date,
                start_time=payload.start_time,
                end_time=payload.end_time,
                reason=payload.reason,
                created_by=created_by,
            )

        overlapping = self._overlapping_bookings(
            window.studio, window.date, window.start_time, window.end_time
        )
        if overlapping:
            logger.warning(
                "Blocked window %s overlaps %d confirmed booking(s): %s",
                window.id,
                len(overlapping),
                [booking.id for booking in overlapping],
            )
        self.log_operation("create_blocked_window", id=window.id, studio=window.studio)
        return window

    @BaseService.measure_operation("create_blocked_windows_bulk")
    def create_blocked_windows_bulk(
        self, payload: BlockedWindowBulkCreate, created_by: Optional[str] = None
    ) -> BulkBlockResult:
        """
        Block ``start_time``-``end_time`` on every date in ``payload.dates``.

        Dates before today, and today once the window has started, are
        skipped as ``past``. Dates where a confirmed booking overlaps the
        window are skipped as ``booked``; exact duplicates as
        ``already_blocked``. Whatever remains is created in one transaction.

        Raises:
            NotFoundException: Unknown studio
            OutOfWindowException: Every requested date is in the past
            ConflictException: Nothing left to block after skipping
        """
        self._ensure_studio(payload.studio)
        now = self._clock()
        today = now.date()
        started = time_to_minutes(payload.start_time) < now.hour * 60 + now.minute

        result = BulkBlockResult()
        pending: List[date] = []
        for day in payload.dates:
            if day < today or (day == today and started):
                result.skipped.append((day, "past"))
            elif self.repository.find_exact(
                payload.studio, day, payload.start_time, payload.end_time
            ):
                result.skipped.append((day, "already_blocked"))
            elif self._overlapping_bookings(
                payload.studio, day, payload.start_time, payload.end_time
            ):
                result.skipped.append((day, "booked"))
            else:
                pending.append(day)

        if not pending:
            details = {
                "skipped": [
                    {"date": day.isoformat(), "reason": why} for day, why in result.skipped
                ]
            }
            if all(why == "past" for _, why in result.skipped):
                raise OutOfWindowException(
                    "All requested dates or times are in the past", details=details
                )
            raise ConflictException(
                "None of the requested dates could be blocked",
                code="bulk_block_conflict",
                details=details,
            )

        with self.transaction():
            for day in pending:
                result.created.append(
                    self.repository.create(
                        studio=payload.studio,
                        date=day,
                        start_time=payload.start_time,
                        end_time=payload.end_time,
                        reason=payload.reason,
                        created_by=created_by,
                    )
                )

        self.log_operation(
            "create_blocked_windows_bulk",
            studio=payload.studio,
            created=len(result.created),
            skipped=len(result.skipped),
        )
        return result

    @BaseService.measure_operation("list_blocked_windows")
    def list_blocked_windows(
        self,
        start_date: date,
        end_date: Optional[date] = None,
        studio: Optional[str] = None,
    ) -> List[BlockedWindow]:
        end_date = end_date or start_date
        if end_date < start_date:
            raise ValidationException(
                "end_date must not be before start_date", code="invalid_date_range"
            )
        if end_date - start_date > timedelta(days=MAX_LIST_RANGE_DAYS):
            raise ValidationException(
                f"Date range cannot exceed {MAX_LIST_RANGE_DAYS} days", code="invalid_date_range"
            )
        return self.repository.list_range(start_date, end_date, studio=studio)

    @BaseService.measure_operation("delete_blocked_window")
    def delete_blocked_window(self, window_id: str) -> None:
        with self.transaction():
            deleted = self.repository.delete(window_id)
            if not deleted:
                raise NotFoundException(
                    "Blocked window not found", details={"id": window_id}
                )
        self.log_operation("delete_blocked_window", id=window_id)

    def _ensure_studio(self, studio: str) -> None:
        if self.studio_repository.get_by_name(studio) is None:
            raise NotFoundException(
                f"Studio '{studio}' not found",
                code="studio_not_found",
                details={"studio": studio},
            )

    def _overlapping_bookings(
        self, studio: str, day: date, start_time: time, end_time: time
    ) -> list:
        return find_booking_conflicts(
            time_to_minutes(start_time),
            time_to_minutes(end_time),
            self.booking_repository.list_active(studio, day),
        )
