"""Shared fixtures for service-level unit tests.

The clock is pinned to 2025-05-31 09:00 in the studio timezone so that
2025-06-01 is always "tomorrow" and 2025-05-31 08:00-09:00 is elapsed.
"""

from datetime import date, datetime
from typing import Callable

import pytest
import pytz
from sqlalchemy.orm import Session

from studio_booking.schemas.booking import BookingMetadata, CustomerInfo
from studio_booking.services.availability_service import AvailabilityService
from studio_booking.services.booking_service import BookingService
from studio_booking.services.booking_settings_service import BookingSettingsService

TODAY = date(2025, 5, 31)
BOOKING_DATE = date(2025, 6, 1)

STUDIO_TZ = pytz.timezone("Asia/Kolkata")


@pytest.fixture
def now() -> datetime:
    return STUDIO_TZ.localize(datetime(TODAY.year, TODAY.month, TODAY.day, 9, 0))


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def booking_date() -> date:
    return BOOKING_DATE


@pytest.fixture
def clock(now: datetime) -> Callable[[], datetime]:
    return lambda: now


@pytest.fixture
def settings_service(db: Session) -> BookingSettingsService:
    return BookingSettingsService(db)


@pytest.fixture
def booking_service(
    db: Session, settings_service: BookingSettingsService, clock: Callable[[], datetime]
) -> BookingService:
    return BookingService(db, settings_service=settings_service, clock=clock)


@pytest.fixture
def availability_service(
    db: Session, settings_service: BookingSettingsService, clock: Callable[[], datetime]
) -> AvailabilityService:
    return AvailabilityService(db, settings_service=settings_service, clock=clock)


@pytest.fixture
def customer() -> CustomerInfo:
    return CustomerInfo(phone_number="9876543210", name="Asha Rao", email="asha@example.com")


@pytest.fixture
def metadata() -> BookingMetadata:
    return BookingMetadata(session_type="Recording", group_size=3)
