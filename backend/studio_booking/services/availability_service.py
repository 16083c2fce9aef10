# backend/studio_booking/services/availability_service.py
"""
Availability Service for the studio booking service.

Loads the inputs of the availability calculator (booking rules, blocked
windows, existing bookings, the studio clock) and returns the slot grid.
Reads take no lock: the grid is advisory and create_booking re-checks
everything under the studio/date lock.
"""

from datetime import date, datetime
import logging
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings as app_settings
from ..core.enums import CallerRole
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..core.timezone_utils import get_studio_now
from ..repositories.factory import RepositoryFactory
from ..schemas.availability import AvailabilityResponse, SlotResponse
from ..schemas.booking_settings import BookingSettings
from .availability_calculator import Slot, compute_slots
from .base import BaseService
from .booking_settings_service import BookingSettingsService

logger = logging.getLogger(__name__)


class AvailabilityService(BaseService):
    """Builds the availability grid for one studio and date."""

    def __init__(
        self,
        db: Session,
        settings_service: Optional[BookingSettingsService] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.blocked_window_repository = RepositoryFactory.create_blocked_window_repository(db)
        self.studio_repository = RepositoryFactory.create_studio_repository(db)
        self.settings_service = settings_service or BookingSettingsService(db)
        self._clock = clock or get_studio_now

    @BaseService.measure_operation("get_available_slots")
    def get_available_slots(
        self,
        studio: str,
        booking_date: date,
        *,
        granularity_minutes: Optional[int] = None,
        allow_past_slots: bool = False,
        caller_role: CallerRole = CallerRole.CUSTOMER,
    ) -> List[Slot]:
        """
        Full slot grid of ``studio`` on ``booking_date``.

        The granularity is clamped to the booking duration limits, so each
        available slot can be booked as-is.

        Raises:
            ForbiddenException: allow_past_slots requested by a customer
            NotFoundException: Unknown or inactive studio
            OutOfWindowException: Date beyond the advance window
            ValidationException: Non-positive granularity
        """
        _, _, slots = self._compute(
            studio, booking_date, granularity_minutes, allow_past_slots, caller_role
        )
        return slots

    def get_availability(
        self,
        studio: str,
        booking_date: date,
        *,
        granularity_minutes: Optional[int] = None,
        allow_past_slots: bool = False,
        caller_role: CallerRole = CallerRole.CUSTOMER,
    ) -> AvailabilityResponse:
        """Slot grid plus the rules it was computed with."""
        rules, granularity, slots = self._compute(
            studio, booking_date, granularity_minutes, allow_past_slots, caller_role
        )
        return AvailabilityResponse(
            studio=studio,
            date=booking_date,
            granularity_minutes=granularity,
            open_time=rules.default_open_time,
            close_time=rules.default_close_time,
            booking_buffer=rules.booking_buffer,
            slots=[
                SlotResponse(
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    available=slot.available,
                    reason=slot.reason,
                )
                for slot in slots
            ],
        )

    def _compute(
        self,
        studio: str,
        booking_date: date,
        granularity_minutes: Optional[int],
        allow_past_slots: bool,
        caller_role: CallerRole,
    ) -> Tuple[BookingSettings, int, List[Slot]]:
        if allow_past_slots and not caller_role.is_privileged:
            raise ForbiddenException(
                "allow_past_slots is restricted to staff",
                details={"caller_role": caller_role.value},
            )

        studio_record = self.studio_repository.get_by_name(studio)
        if studio_record is None or not studio_record.is_active:
            raise NotFoundException(
                f"Studio '{studio}' not found", code="studio_not_found", details={"studio": studio}
            )

        granularity = (
            granularity_minutes
            if granularity_minutes is not None
            else app_settings.slot_granularity_minutes
        )
        if granularity <= 0:
            raise ValidationException(
                "Slot granularity must be a positive number of minutes",
                code="invalid_granularity",
                details={"granularity_minutes": granularity},
            )

        rules = self.settings_service.get_booking_settings().for_studio(studio_record)
        # Every available slot must be a bookable interval on its own
        granularity = min(
            max(granularity, rules.min_duration_minutes), rules.max_duration_minutes
        )
        slots = compute_slots(
            studio,
            booking_date,
            rules,
            self.blocked_window_repository.list_blocked(studio, booking_date),
            self.booking_repository.list_for_day(studio, booking_date),
            self._clock(),
            granularity_minutes=granularity,
            allow_past_slots=allow_past_slots,
        )
        return rules, granularity, slots
