from datetime import date, time

from pydantic import ValidationError
import pytest

from studio_booking.schemas.blocked_window import BlockedWindowBulkCreate, BlockedWindowCreate
from studio_booking.schemas.booking import (
    BookingCancelRequest,
    BookingCreate,
    BookingUpdate,
    normalize_phone_number,
)
from studio_booking.schemas.booking_settings import BookingSettingsUpdate


def _create_payload(**overrides):
    data = {
        "studio": "Studio A",
        "date": "2025-06-01",
        "start_time": "10:00",
        "end_time": "11:00",
        "phone_number": "98765 43210",
    }
    data.update(overrides)
    return data


class TestPhoneNumber:
    @pytest.mark.parametrize(
        "raw", ["9876543210", "+91 98765 43210", "919876543210", "09876543210", "98765-43210"]
    )
    def test_normalized_to_ten_digits(self, raw) -> None:
        assert normalize_phone_number(raw) == "9876543210"

    @pytest.mark.parametrize("raw", ["12345", "98765432101234", None, "phone"])
    def test_invalid(self, raw) -> None:
        with pytest.raises(ValueError):
            normalize_phone_number(raw)


class TestBookingCreate:
    def test_parses_times_and_normalizes_contact(self) -> None:
        booking = BookingCreate(
            **_create_payload(email=" Asha@Example.COM ", start_time="10:00:00")
        )

        assert booking.start_time == time(10, 0)
        assert booking.phone_number == "9876543210"
        assert booking.email == "asha@example.com"
        assert booking.customer_info().phone_number == "9876543210"

    def test_unknown_field_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            BookingCreate(**_create_payload(price=100))

    def test_bad_time_format(self) -> None:
        with pytest.raises(ValidationError):
            BookingCreate(**_create_payload(start_time="10am"))

    def test_bad_email(self) -> None:
        with pytest.raises(ValidationError):
            BookingCreate(**_create_payload(email="not-an-email"))

    def test_reversed_interval_left_to_service(self) -> None:
        # Interval rules are reported by the service with their own error code
        booking = BookingCreate(**_create_payload(start_time="11:00", end_time="10:00"))
        assert booking.end_time < booking.start_time


class TestBookingUpdate:
    def test_changes_only_include_set_fields(self) -> None:
        update = BookingUpdate(notes="Late arrival", skip_validation=True)
        assert update.changes() == {"notes": "Late arrival"}
        assert not update.touches_schedule

    def test_schedule_change_detected(self) -> None:
        assert BookingUpdate(end_time="13:00").touches_schedule

    @pytest.mark.parametrize("field", ["studio", "date", "start_time", "end_time"])
    def test_schedule_fields_cannot_be_null(self, field) -> None:
        with pytest.raises(ValidationError, match="cannot be null"):
            BookingUpdate(**{field: None})

    def test_nullable_detail_fields_may_be_cleared(self) -> None:
        assert BookingUpdate(notes=None).changes() == {"notes": None}


def test_cancel_request_phone_is_optional() -> None:
    assert BookingCancelRequest().phone_number is None
    assert BookingCancelRequest(phone_number="+919876543210").phone_number == "9876543210"


def test_blocked_window_requires_positive_interval() -> None:
    with pytest.raises(ValidationError):
        BlockedWindowCreate(
            studio="Studio A", date="2025-06-01", start_time="12:00", end_time="12:00"
        )


def test_bulk_block_dates_are_deduplicated_and_sorted() -> None:
    payload = BlockedWindowBulkCreate(
        studio="Studio A",
        dates=["2025-06-03", "2025-06-01", "2025-06-03"],
        start_time="09:00",
        end_time="10:00",
    )
    assert payload.dates == [date(2025, 6, 1), date(2025, 6, 3)]


@pytest.mark.parametrize(
    "overrides",
    [{"dates": []}, {"start_time": "10:00", "end_time": "09:00"}, {"extra": 1}],
)
def test_bulk_block_rejects_bad_payloads(overrides) -> None:
    data = {
        "studio": "Studio A",
        "dates": ["2025-06-01"],
        "start_time": "09:00",
        "end_time": "10:00",
    }
    data.update(overrides)
    with pytest.raises(ValidationError):
        BlockedWindowBulkCreate(**data)


class TestBookingSettingsUpdate:
    def test_bounds(self) -> None:
        with pytest.raises(ValidationError):
            BookingSettingsUpdate(booking_buffer=500)
        with pytest.raises(ValidationError):
            BookingSettingsUpdate(advance_booking_days=0)

    def test_open_must_precede_close(self) -> None:
        with pytest.raises(ValidationError):
            BookingSettingsUpdate(default_open_time="20:00", default_close_time="08:00")
