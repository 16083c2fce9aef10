"""
Concurrent booking attempts against a file-backed SQLite database.

Each thread uses its own session, as concurrent requests would.
"""

from datetime import date, datetime, time
import threading
from typing import List

import pytest
import pytz
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from studio_booking.core.booking_lock import held_lock_count
from studio_booking.core.exceptions import SlotConflictException
from studio_booking.database import Base
from studio_booking.models.booking import Booking
from studio_booking.schemas.booking import CustomerInfo
from studio_booking.services.booking_service import BookingService
from studio_booking.services.studio_service import StudioService

BOOKING_DATE = date(2025, 6, 1)
NOW = pytz.timezone("Asia/Kolkata").localize(datetime(2025, 5, 31, 10, 0))


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'bookings.db'}",
        connect_args={"check_same_thread": False, "timeout": 10},
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    with factory() as session:
        StudioService(session).seed_default_studios()
    yield factory
    engine.dispose()


def _race(session_factory, intervals) -> List:
    barrier = threading.Barrier(len(intervals))
    outcomes: List = [None] * len(intervals)

    def attempt(index: int) -> None:
        start, end = intervals[index]
        with session_factory() as session:
            service = BookingService(session, clock=lambda: NOW, lock_timeout_seconds=10)
            barrier.wait()
            try:
                booking = service.create_booking(
                    "Studio A",
                    BOOKING_DATE,
                    start,
                    end,
                    CustomerInfo(phone_number=f"98765432{index:02d}"),
                )
                outcomes[index] = booking.id
            except Exception as exc:  # collected for assertions
                outcomes[index] = exc

    threads = [threading.Thread(target=attempt, args=(i,)) for i in range(len(intervals))]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return outcomes


def _confirmed(session_factory) -> List[Booking]:
    with session_factory() as session:
        return (
            session.query(Booking)
            .filter(Booking.studio == "Studio A", Booking.status == "confirmed")
            .all()
        )


def test_overlapping_requests_exactly_one_wins(session_factory) -> None:
    outcomes = _race(
        session_factory,
        [(time(10, 0), time(11, 0)), (time(10, 30), time(11, 30))],
    )

    successes = [o for o in outcomes if isinstance(o, str)]
    conflicts = [o for o in outcomes if isinstance(o, SlotConflictException)]
    assert len(successes) == 1, outcomes
    assert len(conflicts) == 1, outcomes

    rows = _confirmed(session_factory)
    assert [row.id for row in rows] == successes
    assert held_lock_count() == 0


def test_identical_requests_exactly_one_wins(session_factory) -> None:
    interval = (time(14, 0), time(15, 0))
    outcomes = _race(session_factory, [interval] * 4)

    assert sum(isinstance(o, str) for o in outcomes) == 1, outcomes
    assert sum(isinstance(o, SlotConflictException) for o in outcomes) == 3, outcomes
    assert len(_confirmed(session_factory)) == 1


def test_adjacent_requests_both_win(session_factory) -> None:
    outcomes = _race(
        session_factory,
        [(time(10, 0), time(11, 0)), (time(11, 0), time(12, 0))],
    )

    assert all(isinstance(o, str) for o in outcomes), outcomes
    assert len(_confirmed(session_factory)) == 2

