# backend/studio_booking/services/booking_service.py
"""
Booking Service for the studio booking service.

Owns the only code paths that write bookings. Every write that can
create an overlap runs the same critical section:

    acquire (studio, date) lock -> re-check overlaps -> write -> commit

The lock has two layers: an in-process keyed mutex (core.booking_lock)
and a row lock on the studio/date sentinel (BookingRepository.lock_studio_day).
Both are released when the transaction ends. Events are published only
after commit, and a failing listener never affects the booking.
"""

from contextlib import contextmanager
from datetime import date, datetime, time, timezone
import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.booking_lock import studio_day_lock
from ..core.config import settings as app_settings
from ..core.enums import CallerRole
from ..core.exceptions import (
    BookingNotModifiableException,
    DomainException,
    ForbiddenException,
    InvalidIntervalException,
    NotFoundException,
    OutOfWindowException,
    RepositoryException,
    SlotConflictException,
    StoreUnavailableException,
)
from ..core.timezone_utils import get_studio_now
from ..events.booking_events import BookingCancelled, BookingCreated, BookingEvent, BookingUpdated
from ..events.publisher import BookingEventPublisher
from ..models.booking import Booking, BookingStatus
from ..models.studio import Studio
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import BookingMetadata, BookingUpdate, CustomerInfo
from ..schemas.booking_settings import BookingSettings
from ..utils.time_utils import format_time, time_to_minutes
from .availability_calculator import (
    ensure_within_advance_window,
    find_booking_conflicts,
    find_window_conflicts,
)
from .base import BaseService
from .booking_settings_service import BookingSettingsService

logger = logging.getLogger(__name__)

GENERIC_CONFLICT_MESSAGE = "This time slot conflicts with an existing booking"
BLOCKED_CONFLICT_MESSAGE = "This time slot has been blocked by the studio"


class BookingService(BaseService):
    """
    Service layer for creating, editing and cancelling bookings.

    Collaborators are injected so tests can pin the clock and the rules:
        clock: returns the current studio-local datetime
        settings_service: source of BookingSettings, read once per call
        event_publisher: receives committed booking events
    """

    def __init__(
        self,
        db: Session,
        settings_service: Optional[BookingSettingsService] = None,
        clock: Optional[Callable[[], datetime]] = None,
        event_publisher: Any = BookingEventPublisher,
        lock_timeout_seconds: Optional[float] = None,
    ):
        super().__init__(db)
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.blocked_window_repository = RepositoryFactory.create_blocked_window_repository(db)
        self.studio_repository = RepositoryFactory.create_studio_repository(db)
        self.settings_service = settings_service or BookingSettingsService(db)
        self._clock = clock or get_studio_now
        self.event_publisher = event_publisher
        self.lock_timeout_seconds = (
            lock_timeout_seconds
            if lock_timeout_seconds is not None
            else app_settings.booking_lock_timeout_seconds
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @BaseService.measure_operation("get_booking")
    def get_booking(self, booking_id: str) -> Booking:
        booking = self.repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        return booking

    @BaseService.measure_operation("list_bookings_for_day")
    def list_bookings_for_day(
        self, studio: str, booking_date: date, status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        statuses = [status.value] if status is not None else None
        return self.repository.list_for_day(studio, booking_date, statuses=statuses)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self,
        studio: str,
        booking_date: date,
        start_time: time,
        end_time: time,
        customer_info: CustomerInfo,
        metadata: Optional[BookingMetadata] = None,
        *,
        caller_role: CallerRole = CallerRole.CUSTOMER,
        skip_validation: bool = False,
        allow_past_slots: bool = False,
    ) -> Booking:
        """
        Create a confirmed booking if and only if the interval is free.

        Args:
            studio: Studio name
            booking_date: Date of the booking (studio timezone)
            start_time: Inclusive start
            end_time: Exclusive end
            customer_info: Contact details
            metadata: Session details and notes
            caller_role: Role asserted by the gateway
            skip_validation: Privileged override, skips availability re-checks
                but still takes the lock and uses the same insert path
            allow_past_slots: Privileged, permits historical bookings

        Returns:
            The committed booking

        Raises:
            ForbiddenException: Privileged flag used by a customer
            NotFoundException: Unknown or inactive studio
            InvalidIntervalException: Empty/reversed interval, bad duration, outside hours
            OutOfWindowException: Date beyond the advance window or already elapsed
            SlotConflictException: Overlaps a confirmed booking or blocked window
            StoreUnavailableException: Lock timeout or store failure (retry-safe)
        """
        metadata = metadata or BookingMetadata()
        self.log_operation(
            "create_booking",
            studio=studio,
            date=booking_date.isoformat(),
            start_time=format_time(start_time),
            end_time=format_time(end_time),
            caller_role=caller_role.value,
            skip_validation=skip_validation,
        )

        try:
            # 1. Pre-conditions, no lock held
            self._ensure_privileged(caller_role, skip_validation, allow_past_slots)
            studio_record = self._get_active_studio(studio)
            rules = self.settings_service.get_booking_settings().for_studio(studio_record)
            now = self._clock()
            start_min, end_min = self._validate_interval(start_time, end_time, rules)
            ensure_within_advance_window(booking_date, now.date(), rules)
            if not skip_validation:
                self._validate_bookable_time(
                    booking_date, start_min, end_min, rules, now, allow_past_slots
                )

            # 2. Critical section: lock -> re-check -> insert -> commit
            with self._studio_day_critical_section(studio, booking_date):
                if not skip_validation:
                    self._ensure_no_conflicts(studio, booking_date, start_min, end_min, rules)
                booking = self.repository.insert(
                    studio=studio,
                    date=booking_date,
                    start_time=start_time,
                    end_time=end_time,
                    status=BookingStatus.CONFIRMED.value,
                    phone_number=customer_info.phone_number,
                    name=customer_info.name,
                    email=customer_info.email,
                    session_type=metadata.session_type,
                    session_details=metadata.session_details,
                    group_size=metadata.group_size,
                    notes=metadata.notes,
                    total_amount=self._calculate_total(studio_record, start_min, end_min),
                    created_by_role=caller_role.value,
                    confirmed_at=datetime.now(timezone.utc),
                )
        except DomainException as exc:
            prometheus_metrics.record_booking_outcome("create", exc.code)
            raise

        prometheus_metrics.record_booking_outcome("create", "created")
        if skip_validation:
            self.logger.warning(
                "Booking %s created with skip_validation by %s", booking.id, caller_role.value
            )

        # 3. Post-commit, fire and forget
        self._publish(
            BookingCreated(
                **self._event_base(booking, caller_role),
                name=booking.name,
                email=booking.email,
                total_amount=booking.total_amount,
                skipped_validation=skip_validation,
            )
        )
        return booking

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    @BaseService.measure_operation("update_booking")
    def update_booking(
        self,
        booking_id: str,
        update: BookingUpdate,
        *,
        caller_role: CallerRole = CallerRole.STAFF,
    ) -> Booking:
        """
        Edit a booking. Schedule changes run the same critical section as
        create, with the booking's own id excluded from the conflict scan.

        Raises:
            ForbiddenException: Caller is not staff/admin
            NotFoundException: Unknown booking or studio
            BookingNotModifiableException: Booking is already closed
            InvalidIntervalException / OutOfWindowException / SlotConflictException /
            StoreUnavailableException: As for create_booking
        """
        changes = update.changes()
        self.log_operation(
            "update_booking",
            booking_id=booking_id,
            fields=sorted(changes),
            caller_role=caller_role.value,
        )

        try:
            if not caller_role.is_privileged:
                raise ForbiddenException("Only staff can edit bookings")
            current = self.get_booking(booking_id)
            if not current.is_modifiable:
                raise BookingNotModifiableException(booking_id, current.status)

            if update.touches_schedule:
                booking = self._update_schedule(current, update, changes)
            else:
                booking = self._update_details(booking_id, changes)
        except DomainException as exc:
            prometheus_metrics.record_booking_outcome("update", exc.code)
            raise

        prometheus_metrics.record_booking_outcome("update", "updated")
        self._publish(
            BookingUpdated(**self._event_base(booking, caller_role), changed_fields=changes)
        )
        return booking

    def _update_schedule(
        self, current: Booking, update: BookingUpdate, changes: Dict[str, Any]
    ) -> Booking:
        studio = changes.get("studio") or current.studio
        booking_date = changes.get("date") or current.date
        start_time = changes.get("start_time") or current.start_time
        end_time = changes.get("end_time") or current.end_time

        studio_record = self._get_active_studio(studio)
        rules = self.settings_service.get_booking_settings().for_studio(studio_record)
        now = self._clock()
        start_min, end_min = self._validate_interval(start_time, end_time, rules)
        ensure_within_advance_window(booking_date, now.date(), rules)
        if not update.skip_validation:
            self._validate_bookable_time(
                booking_date, start_min, end_min, rules, now, update.allow_past_slots
            )

        with self._studio_day_critical_section(studio, booking_date):
            locked = self._lock_booking(current.id)
            if not update.skip_validation:
                self._ensure_no_conflicts(
                    studio, booking_date, start_min, end_min, rules, exclude_booking_id=locked.id
                )
            # Persist the interval that was checked, not the raw payload
            fields = dict(
                changes,
                studio=studio,
                date=booking_date,
                start_time=start_time,
                end_time=end_time,
                total_amount=self._calculate_total(studio_record, start_min, end_min),
            )
            booking = self.repository.update_fields(locked, **fields)
        return booking

    def _update_details(self, booking_id: str, changes: Dict[str, Any]) -> Booking:
        try:
            with self.repository.transaction():
                locked = self._lock_booking(booking_id)
                booking = self.repository.update_fields(locked, **changes)
        except (SQLAlchemyError, RepositoryException) as exc:
            raise StoreUnavailableException(details={"error_type": type(exc).__name__}) from exc
        return booking

    def _lock_booking(self, booking_id: str) -> Booking:
        locked = self.repository.get_for_update(booking_id)
        if locked is None:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        if not locked.is_modifiable:
            raise BookingNotModifiableException(booking_id, locked.status)
        return locked

    # ------------------------------------------------------------------
    # Cancel
    # ------------------------------------------------------------------

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(
        self,
        booking_id: str,
        *,
        caller_role: CallerRole = CallerRole.CUSTOMER,
        reason: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> Booking:
        """
        Cancel a booking, freeing its interval immediately.

        Customers must present the phone number on the booking and may only
        cancel bookings that have not started yet.
        """
        self.log_operation("cancel_booking", booking_id=booking_id, caller_role=caller_role.value)

        try:
            booking = self.get_booking(booking_id)
            if not caller_role.is_privileged:
                if phone_number is None or phone_number != booking.phone_number:
                    # Same answer as a missing booking so ids cannot be enumerated
                    raise NotFoundException(
                        "Booking not found", details={"booking_id": booking_id}
                    )
                self._ensure_not_started(booking)
            if not booking.is_modifiable:
                raise BookingNotModifiableException(booking_id, booking.status)

            try:
                with self.repository.transaction():
                    locked = self._lock_booking(booking_id)
                    locked.cancel(reason)
                    self.repository.update_fields(locked)
            except (SQLAlchemyError, RepositoryException) as exc:
                raise StoreUnavailableException(
                    details={"error_type": type(exc).__name__}
                ) from exc
        except DomainException as exc:
            prometheus_metrics.record_booking_outcome("cancel", exc.code)
            raise

        prometheus_metrics.record_booking_outcome("cancel", "cancelled")
        self._publish(BookingCancelled(**self._event_base(locked, caller_role), reason=reason))
        return locked

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _studio_day_critical_section(self, studio: str, booking_date: date) -> Iterator[None]:
        """
        Hold the (studio, date) lock for one transaction.

        Commits on normal exit; rolls back on any exception. Store failures
        become StoreUnavailableException, domain errors pass through.
        """
        with studio_day_lock(
            studio, booking_date, timeout_s=self.lock_timeout_seconds
        ) as acquired:
            if not acquired:
                raise StoreUnavailableException(
                    "Timed out waiting for the booking lock. Please retry.",
                    details={"studio": studio, "date": booking_date.isoformat()},
                )
            try:
                with self.repository.transaction():
                    self.repository.lock_studio_day(
                        studio, booking_date, timeout_seconds=self.lock_timeout_seconds
                    )
                    yield
            except (SQLAlchemyError, RepositoryException) as exc:
                self.logger.error(
                    "Booking write failed for %s on %s: %s",
                    studio,
                    booking_date.isoformat(),
                    exc,
                )
                raise StoreUnavailableException(
                    details={
                        "studio": studio,
                        "date": booking_date.isoformat(),
                        "error_type": type(exc).__name__,
                    }
                ) from exc

    def _ensure_privileged(
        self, caller_role: CallerRole, skip_validation: bool, allow_past_slots: bool
    ) -> None:
        if caller_role.is_privileged:
            return
        if skip_validation or allow_past_slots:
            raise ForbiddenException(
                "skip_validation and allow_past_slots are restricted to staff",
                details={"caller_role": caller_role.value},
            )

    def _get_active_studio(self, studio: str) -> Studio:
        record = self.studio_repository.get_by_name(studio)
        if record is None or not record.is_active:
            raise NotFoundException(
                f"Studio '{studio}' not found", code="studio_not_found", details={"studio": studio}
            )
        return record

    def _validate_interval(
        self, start_time: time, end_time: time, rules: BookingSettings
    ) -> Tuple[int, int]:
        start_min = time_to_minutes(start_time)
        end_min = time_to_minutes(end_time)
        if end_min <= start_min:
            raise InvalidIntervalException(
                "End time must be after start time",
                details={"start_time": format_time(start_time), "end_time": format_time(end_time)},
            )

        duration = end_min - start_min
        if duration < rules.min_duration_minutes or duration > rules.max_duration_minutes:
            raise InvalidIntervalException(
                f"Booking must be between {rules.min_booking_duration:g} and "
                f"{rules.max_booking_duration:g} hours",
                details={
                    "duration_minutes": duration,
                    "min_booking_duration": rules.min_booking_duration,
                    "max_booking_duration": rules.max_booking_duration,
                },
            )
        return start_min, end_min

    def _validate_bookable_time(
        self,
        booking_date: date,
        start_min: int,
        end_min: int,
        rules: BookingSettings,
        now: datetime,
        allow_past_slots: bool,
    ) -> None:
        """Operating hours and elapsed-time checks; mirrors the availability grid."""
        if start_min < rules.open_minutes or end_min > rules.close_minutes:
            raise InvalidIntervalException(
                "Booking must fall within operating hours",
                details={
                    "open_time": format_time(rules.default_open_time),
                    "close_time": format_time(rules.default_close_time),
                },
            )

        if allow_past_slots:
            return
        today = now.date()
        now_min = now.hour * 60 + now.minute
        if booking_date < today or (booking_date == today and end_min <= now_min):
            raise OutOfWindowException(
                "This time slot has already passed",
                details={"date": booking_date.isoformat(), "now": now.isoformat()},
            )

    def _ensure_no_conflicts(
        self,
        studio: str,
        booking_date: date,
        start_min: int,
        end_min: int,
        rules: BookingSettings,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        """Re-check blocked windows and confirmed bookings. Must run under the lock."""
        windows = find_window_conflicts(
            start_min,
            end_min,
            self.blocked_window_repository.list_blocked(studio, booking_date),
        )
        if windows:
            raise SlotConflictException(
                BLOCKED_CONFLICT_MESSAGE,
                conflicts=[
                    {
                        "kind": "blocked",
                        "id": window.id,
                        "start_time": format_time(window.start_time),
                        "end_time": format_time(window.end_time),
                    }
                    for window in windows
                ],
            )

        bookings = find_booking_conflicts(
            start_min,
            end_min,
            self.repository.list_active(studio, booking_date),
            buffer_minutes=rules.booking_buffer,
            exclude_booking_id=exclude_booking_id,
        )
        if bookings:
            self.logger.info(
                "Slot conflict for %s on %s with %d booking(s)",
                studio,
                booking_date.isoformat(),
                len(bookings),
            )
            raise SlotConflictException(
                GENERIC_CONFLICT_MESSAGE,
                conflicts=[
                    {
                        "kind": "booking",
                        "id": booking.id,
                        "start_time": format_time(booking.start_time),
                        "end_time": format_time(booking.end_time),
                    }
                    for booking in bookings
                ],
                details={"booking_buffer": rules.booking_buffer},
            )

    def _ensure_not_started(self, booking: Booking) -> None:
        now = self._clock()
        today = now.date()
        now_min = now.hour * 60 + now.minute
        if booking.date < today or (
            booking.date == today and time_to_minutes(booking.start_time) <= now_min
        ):
            raise OutOfWindowException(
                "Cannot cancel a booking that has already started",
                details={"booking_id": booking.id},
            )

    @staticmethod
    def _calculate_total(studio: Studio, start_min: int, end_min: int) -> int:
        """Hourly rate times duration, rounded to a whole amount."""
        return int(round((studio.hourly_rate or 0) * (end_min - start_min) / 60))

    def _event_base(self, booking: Booking, caller_role: CallerRole) -> Dict[str, Any]:
        return {
            "booking_id": booking.id,
            "studio": booking.studio,
            "date": booking.date,
            "start_time": booking.start_time,
            "end_time": booking.end_time,
            "phone_number": booking.phone_number,
            "actor_role": caller_role.value,
            "occurred_at": datetime.now(timezone.utc),
        }

    def _publish(self, event: BookingEvent) -> None:
        """Dispatch a committed event. Never raises."""
        try:
            self.event_publisher.publish(event)
        except Exception:
            self.logger.exception("Failed to publish %s for %s", event.event_type, event.booking_id)
