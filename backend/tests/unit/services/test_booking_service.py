from __future__ import annotations

from datetime import date, time
from typing import List
from unittest.mock import Mock

import pytest
from sqlalchemy.orm import Session

from studio_booking.core.booking_lock import studio_day_lock
from studio_booking.core.enums import CallerRole
from studio_booking.core.exceptions import (
    BookingNotModifiableException,
    ForbiddenException,
    InvalidIntervalException,
    NotFoundException,
    OutOfWindowException,
    RepositoryException,
    SlotConflictException,
    StoreUnavailableException,
)
from studio_booking.events.booking_events import BookingCancelled, BookingCreated, BookingEvent
from studio_booking.events.publisher import BookingEventPublisher
from studio_booking.models.blocked_window import BlockedWindow
from studio_booking.models.booking import Booking, BookingStatus
from studio_booking.models.studio import Studio
from studio_booking.schemas.booking import BookingUpdate, CustomerInfo
from studio_booking.schemas.booking_settings import BookingSettingsUpdate
from studio_booking.services.booking_service import BookingService
from studio_booking.services.booking_settings_service import BookingSettingsService


def _t(value: str) -> time:
    return time.fromisoformat(value)


def _create(
    service: BookingService,
    customer: CustomerInfo,
    booking_date: date,
    start: str,
    end: str,
    **kwargs,
):
    return service.create_booking("Studio A", booking_date, _t(start), _t(end), customer, **kwargs)


class TestCreateBooking:
    def test_creates_confirmed_booking(
        self, db: Session, booking_service, customer, metadata, booking_date
    ) -> None:
        booking = booking_service.create_booking(
            "Studio A", booking_date, _t("10:00"), _t("12:00"), customer, metadata
        )

        stored = db.query(Booking).filter(Booking.id == booking.id).one()
        assert stored.status == BookingStatus.CONFIRMED.value
        assert stored.phone_number == "9876543210"
        assert stored.session_type == "Recording"
        assert stored.total_amount == 1000  # 2h at 500/h
        assert stored.created_by_role == "customer"
        assert stored.confirmed_at is not None

    def test_overlapping_request_is_rejected(self, booking_service, customer, booking_date) -> None:
        first = _create(booking_service, customer, booking_date, "10:00", "11:00")

        with pytest.raises(SlotConflictException) as exc_info:
            _create(booking_service, customer, booking_date, "10:30", "11:30")

        assert exc_info.value.code == "slot_conflict"
        conflicts = exc_info.value.details["conflicts"]
        assert [c["id"] for c in conflicts] == [first.id]

    def test_touching_intervals_are_both_accepted(
        self, booking_service, customer, booking_date
    ) -> None:
        _create(booking_service, customer, booking_date, "10:00", "11:00")
        second = _create(booking_service, customer, booking_date, "11:00", "12:00")
        assert second.status == BookingStatus.CONFIRMED.value

    def test_other_studio_is_independent(self, booking_service, customer, booking_date) -> None:
        _create(booking_service, customer, booking_date, "10:00", "11:00")
        other = booking_service.create_booking(
            "Studio B", booking_date, _t("10:00"), _t("11:00"), customer
        )
        assert other.total_amount == 400

    def test_cancelled_booking_frees_the_slot(
        self, booking_service, customer, booking_date
    ) -> None:
        first = _create(booking_service, customer, booking_date, "10:00", "11:00")
        booking_service.cancel_booking(first.id, caller_role=CallerRole.STAFF)

        again = _create(booking_service, customer, booking_date, "10:00", "11:00")
        assert again.id != first.id

    @pytest.mark.parametrize(
        "start,end",
        [("11:00", "10:00"), ("10:00", "10:00")],
    )
    def test_empty_or_reversed_interval(
        self, booking_service, customer, booking_date, start, end
    ) -> None:
        with pytest.raises(InvalidIntervalException) as exc_info:
            _create(booking_service, customer, booking_date, start, end)
        assert exc_info.value.code == "invalid_interval"

    def test_duration_outside_limits(self, booking_service, customer, booking_date) -> None:
        with pytest.raises(InvalidIntervalException):
            _create(booking_service, customer, booking_date, "10:00", "10:30")
        with pytest.raises(InvalidIntervalException):
            _create(booking_service, customer, booking_date, "08:00", "17:00")

    def test_outside_operating_hours(self, booking_service, customer, booking_date) -> None:
        with pytest.raises(InvalidIntervalException):
            _create(booking_service, customer, booking_date, "07:00", "08:00")
        with pytest.raises(InvalidIntervalException):
            _create(booking_service, customer, booking_date, "21:30", "22:30")

    def test_beyond_advance_window(self, booking_service, customer) -> None:
        with pytest.raises(OutOfWindowException) as exc_info:
            _create(booking_service, customer, date(2025, 7, 15), "10:00", "11:00")
        assert exc_info.value.code == "out_of_window"

    def test_elapsed_slot_today(self, booking_service, customer, today) -> None:
        # Clock is 09:00
        with pytest.raises(OutOfWindowException):
            _create(booking_service, customer, today, "08:00", "09:00")
        booking = _create(booking_service, customer, today, "09:00", "10:00")
        assert booking.date == today

    def test_staff_may_book_elapsed_slot(self, booking_service, customer, today) -> None:
        booking = _create(
            booking_service,
            customer,
            today,
            "08:00",
            "09:00",
            caller_role=CallerRole.STAFF,
            allow_past_slots=True,
        )
        assert booking.created_by_role == "staff"

    def test_buffer_is_enforced(
        self, db: Session, booking_service, settings_service, customer, booking_date
    ) -> None:
        settings_service.update_booking_settings(BookingSettingsUpdate(booking_buffer=30))
        _create(booking_service, customer, booking_date, "10:00", "11:00")

        with pytest.raises(SlotConflictException):
            _create(booking_service, customer, booking_date, "11:00", "12:00")
        accepted = _create(booking_service, customer, booking_date, "11:30", "12:30")
        assert accepted.start_time == _t("11:30")

    def test_blocked_window_is_enforced(
        self, db: Session, booking_service, customer, booking_date
    ) -> None:
        db.add(
            BlockedWindow(
                studio="Studio A",
                date=booking_date,
                start_time=_t("14:00"),
                end_time=_t("16:00"),
                reason="Maintenance",
            )
        )
        db.commit()

        with pytest.raises(SlotConflictException) as exc_info:
            _create(booking_service, customer, booking_date, "15:00", "16:00")
        assert exc_info.value.details["conflicts"][0]["kind"] == "blocked"

    def test_unknown_studio(self, booking_service, customer, booking_date) -> None:
        with pytest.raises(NotFoundException):
            booking_service.create_booking(
                "Studio Z", booking_date, _t("10:00"), _t("11:00"), customer
            )

    @pytest.mark.parametrize("flag", ["skip_validation", "allow_past_slots"])
    def test_privileged_flags_require_staff(
        self, booking_service, customer, booking_date, flag
    ) -> None:
        with pytest.raises(ForbiddenException):
            _create(booking_service, customer, booking_date, "10:00", "11:00", **{flag: True})

    def test_skip_validation_bypasses_conflict_check(
        self, db: Session, booking_service, customer, booking_date
    ) -> None:
        _create(booking_service, customer, booking_date, "10:00", "11:00")
        forced = _create(
            booking_service,
            customer,
            booking_date,
            "10:30",
            "11:30",
            caller_role=CallerRole.ADMIN,
            skip_validation=True,
        )
        assert forced.status == BookingStatus.CONFIRMED.value
        assert db.query(Booking).count() == 2

    def test_skip_validation_still_checks_interval(
        self, booking_service, customer, booking_date
    ) -> None:
        with pytest.raises(InvalidIntervalException):
            _create(
                booking_service,
                customer,
                booking_date,
                "11:00",
                "10:00",
                caller_role=CallerRole.ADMIN,
                skip_validation=True,
            )

    def test_lock_timeout_is_store_unavailable(
        self, db: Session, settings_service, clock, customer, booking_date
    ) -> None:
        service = BookingService(
            db, settings_service=settings_service, clock=clock, lock_timeout_seconds=0.05
        )
        with studio_day_lock("Studio A", booking_date) as acquired:
            assert acquired
            with pytest.raises(StoreUnavailableException) as exc_info:
                _create(service, customer, booking_date, "10:00", "11:00")

        assert exc_info.value.code == "store_unavailable"
        assert db.query(Booking).count() == 0

    def test_store_failure_is_store_unavailable(
        self, db: Session, booking_service, customer, booking_date
    ) -> None:
        booking_service.repository.insert = Mock(side_effect=RepositoryException("disk full"))

        with pytest.raises(StoreUnavailableException):
            _create(booking_service, customer, booking_date, "10:00", "11:00")
        assert db.query(Booking).count() == 0

    def test_event_published_after_commit(
        self, db: Session, booking_service, customer, booking_date
    ) -> None:
        received: List[BookingEvent] = []

        def listener(event: BookingEvent) -> None:
            # The booking must already be visible when listeners run
            assert db.query(Booking).filter(Booking.id == event.booking_id).count() == 1
            received.append(event)

        BookingEventPublisher.register(listener)
        booking = _create(booking_service, customer, booking_date, "10:00", "11:00")

        assert len(received) == 1
        assert isinstance(received[0], BookingCreated)
        assert received[0].booking_id == booking.id
        assert received[0].to_dict()["start_time"] == "10:00"

    def test_failing_listener_does_not_fail_booking(
        self, db: Session, booking_service, customer, booking_date
    ) -> None:
        BookingEventPublisher.register(Mock(side_effect=RuntimeError("smtp down")))

        booking = _create(booking_service, customer, booking_date, "10:00", "11:00")

        assert db.query(Booking).filter(Booking.id == booking.id).count() == 1

    def test_rejected_booking_publishes_nothing(
        self, booking_service, customer, booking_date
    ) -> None:
        listener = Mock()
        BookingEventPublisher.register(listener)
        _create(booking_service, customer, booking_date, "10:00", "11:00")
        listener.reset_mock()

        with pytest.raises(SlotConflictException):
            _create(booking_service, customer, booking_date, "10:00", "11:00")
        listener.assert_not_called()


class TestUpdateBooking:
    def test_shift_overlapping_own_interval(self, booking_service, customer, booking_date) -> None:
        booking = _create(booking_service, customer, booking_date, "10:00", "11:00")

        updated = booking_service.update_booking(
            booking.id,
            BookingUpdate(start_time="10:30", end_time="11:30"),
            caller_role=CallerRole.STAFF,
        )

        assert updated.start_time == _t("10:30")
        assert updated.end_time == _t("11:30")

    def test_move_onto_other_booking_conflicts(
        self, booking_service, customer, booking_date
    ) -> None:
        _create(booking_service, customer, booking_date, "10:00", "11:00")
        second = _create(booking_service, customer, booking_date, "12:00", "13:00")

        with pytest.raises(SlotConflictException):
            booking_service.update_booking(
                second.id,
                BookingUpdate(start_time="10:30", end_time="11:30"),
                caller_role=CallerRole.STAFF,
            )

    def test_duration_change_recomputes_amount(
        self, booking_service, customer, booking_date
    ) -> None:
        booking = _create(booking_service, customer, booking_date, "10:00", "11:00")
        updated = booking_service.update_booking(
            booking.id, BookingUpdate(end_time="13:00"), caller_role=CallerRole.STAFF
        )
        assert updated.total_amount == 1500

    def test_unvalidated_null_keeps_stored_interval(
        self, booking_service, customer, booking_date
    ) -> None:
        booking = _create(booking_service, customer, booking_date, "10:00", "11:00")
        update = BookingUpdate.model_construct(
            _fields_set={"start_time", "end_time"}, start_time=None, end_time=_t("12:00")
        )

        updated = booking_service.update_booking(booking.id, update, caller_role=CallerRole.STAFF)

        assert updated.start_time == _t("10:00")
        assert updated.end_time == _t("12:00")
        assert updated.total_amount == 1000

    def test_detail_only_change(self, booking_service, customer, booking_date) -> None:
        booking = _create(booking_service, customer, booking_date, "10:00", "11:00")
        updated = booking_service.update_booking(
            booking.id, BookingUpdate(notes="Bring own mic"), caller_role=CallerRole.STAFF
        )
        assert updated.notes == "Bring own mic"
        assert updated.start_time == _t("10:00")

    def test_customer_cannot_update(self, booking_service, customer, booking_date) -> None:
        booking = _create(booking_service, customer, booking_date, "10:00", "11:00")
        with pytest.raises(ForbiddenException):
            booking_service.update_booking(
                booking.id, BookingUpdate(notes="x"), caller_role=CallerRole.CUSTOMER
            )

    def test_cancelled_booking_is_not_modifiable(
        self, booking_service, customer, booking_date
    ) -> None:
        booking = _create(booking_service, customer, booking_date, "10:00", "11:00")
        booking_service.cancel_booking(booking.id, caller_role=CallerRole.STAFF)

        with pytest.raises(BookingNotModifiableException):
            booking_service.update_booking(
                booking.id, BookingUpdate(notes="x"), caller_role=CallerRole.STAFF
            )

    @pytest.mark.parametrize("final_status", ["completed", "no_show"])
    def test_closed_booking_is_not_modifiable(
        self, db, booking_service, customer, booking_date, final_status
    ) -> None:
        booking = _create(booking_service, customer, booking_date, "10:00", "11:00")
        booking.status = final_status
        db.commit()

        with pytest.raises(BookingNotModifiableException):
            booking_service.update_booking(
                booking.id, BookingUpdate(end_time="12:00"), caller_role=CallerRole.STAFF
            )
        with pytest.raises(BookingNotModifiableException):
            booking_service.cancel_booking(booking.id, caller_role=CallerRole.STAFF)

    def test_unknown_booking(self, booking_service) -> None:
        with pytest.raises(NotFoundException):
            booking_service.update_booking(
                "01HF4G12ABCDEF3456789XYZAB", BookingUpdate(notes="x"), caller_role=CallerRole.STAFF
            )


class TestCancelBooking:
    def test_customer_cancels_with_matching_phone(
        self, booking_service, customer, booking_date
    ) -> None:
        listener = Mock()
        BookingEventPublisher.register(listener)
        booking = _create(booking_service, customer, booking_date, "10:00", "11:00")

        cancelled = booking_service.cancel_booking(
            booking.id, reason="Change of plans", phone_number="9876543210"
        )

        assert cancelled.status == BookingStatus.CANCELLED.value
        assert cancelled.cancellation_reason == "Change of plans"
        assert cancelled.cancelled_at is not None
        assert isinstance(listener.call_args_list[-1].args[0], BookingCancelled)

    def test_customer_with_wrong_phone_sees_not_found(
        self, booking_service, customer, booking_date
    ) -> None:
        booking = _create(booking_service, customer, booking_date, "10:00", "11:00")
        with pytest.raises(NotFoundException):
            booking_service.cancel_booking(booking.id, phone_number="9000000000")

    def test_customer_cannot_cancel_started_booking(self, booking_service, customer, today) -> None:
        booking = _create(
            booking_service,
            customer,
            today,
            "08:00",
            "10:00",
            caller_role=CallerRole.STAFF,
            allow_past_slots=True,
        )
        with pytest.raises(OutOfWindowException):
            booking_service.cancel_booking(booking.id, phone_number="9876543210")

        cancelled = booking_service.cancel_booking(booking.id, caller_role=CallerRole.STAFF)
        assert cancelled.status == BookingStatus.CANCELLED.value

    def test_cancel_twice(self, booking_service, customer, booking_date) -> None:
        booking = _create(booking_service, customer, booking_date, "10:00", "11:00")
        booking_service.cancel_booking(booking.id, caller_role=CallerRole.STAFF)
        with pytest.raises(BookingNotModifiableException):
            booking_service.cancel_booking(booking.id, caller_role=CallerRole.STAFF)


def test_settings_are_read_per_call(db: Session, clock, customer, booking_date) -> None:
    settings_service = BookingSettingsService(db)
    service = BookingService(db, settings_service=settings_service, clock=clock)

    settings_service.update_booking_settings(BookingSettingsUpdate(max_booking_duration=2))
    with pytest.raises(InvalidIntervalException):
        _create(service, customer, booking_date, "10:00", "13:00")

    settings_service.update_booking_settings(BookingSettingsUpdate(max_booking_duration=4))
    booking = _create(service, customer, booking_date, "10:00", "13:00")
    assert booking.total_amount == 1500


def test_studio_hours_are_enforced(db: Session, booking_service, customer, booking_date) -> None:
    db.query(Studio).filter(Studio.name == "Studio C").update(
        {"open_time": time(10, 0), "close_time": time(14, 0)}
    )
    db.commit()

    with pytest.raises(InvalidIntervalException):
        booking_service.create_booking(
            "Studio C", booking_date, _t("09:00"), _t("10:00"), customer
        )
    booking = booking_service.create_booking(
        "Studio C", booking_date, _t("13:00"), _t("14:00"), customer
    )
    assert booking.total_amount == 300
