# backend/studio_booking/repositories/booking_repository.py
"""
Booking Repository for the studio booking service.

Data access for bookings plus the per studio/date row lock that
serializes booking writes across processes. Overlap rules live in the
availability calculator; this repository only loads the rows they run on.
"""

from datetime import date, datetime
import logging
from typing import Any, Collection, List, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.booking import OCCUPYING_STATUSES, Booking
from ..models.studio_day_lock import StudioDayLock
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking rows and the studio/date lock."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def list_for_day(
        self,
        studio: str,
        booking_date: date,
        statuses: Optional[Collection[str]] = None,
    ) -> List[Booking]:
        """
        Bookings of a studio on a date, ordered by start time.

        Args:
            studio: Studio name
            booking_date: Date to load
            statuses: Optional status filter (all statuses when None)
        """
        try:
            query = self.db.query(Booking).filter(
                Booking.studio == studio,
                Booking.date == booking_date,
            )
            if statuses is not None:
                values = [getattr(s, "value", s) for s in statuses]
                query = query.filter(Booking.status.in_(values))
            return query.order_by(Booking.start_time).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading bookings for {studio} on {booking_date}: {str(e)}")
            raise RepositoryException(f"Failed to load bookings: {str(e)}") from e

    def list_active(self, studio: str, booking_date: date) -> List[Booking]:
        """Bookings that occupy their interval (confirmed only)."""
        return self.list_for_day(studio, booking_date, statuses=OCCUPYING_STATUSES)

    def get_for_update(self, booking_id: str) -> Optional[Booking]:
        """Load a booking and lock its row until the transaction ends."""
        try:
            return (
                self.db.query(Booking)
                .filter(Booking.id == booking_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock booking: {str(e)}") from e

    def insert(self, **fields: Any) -> Booking:
        """Insert a booking row (flushed, not committed)."""
        return self.create(**fields)

    def update_fields(self, booking: Booking, **fields: Any) -> Booking:
        """Apply field changes to a loaded booking (flushed, not committed)."""
        try:
            for key, value in fields.items():
                if hasattr(booking, key):
                    setattr(booking, key, value)
            self.db.flush()
            return booking
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating booking {booking.id}: {str(e)}")
            raise RepositoryException(f"Failed to update booking: {str(e)}") from e

    def lock_studio_day(
        self,
        studio: str,
        booking_date: date,
        *,
        timeout_seconds: Optional[float] = None,
    ) -> StudioDayLock:
        """
        Take the row lock for (studio, date) inside the current transaction.

        The sentinel row is created on first use. The lock is released when
        the surrounding transaction commits or rolls back.

        Raises:
            RepositoryException: If the lock cannot be taken (including lock timeout)
        """
        is_postgres = self.dialect_name == "postgresql"
        try:
            if is_postgres and timeout_seconds:
                lock_ms = max(int(timeout_seconds * 1000), 1)
                self.db.execute(text(f"SET LOCAL lock_timeout = '{lock_ms}ms'"))

            row = self._select_day_lock(studio, booking_date)
            if row is None:
                self._create_day_lock(studio, booking_date, savepoint=is_postgres)
                row = self._select_day_lock(studio, booking_date)
            if row is None:
                raise RepositoryException(f"Lock row missing for {studio} on {booking_date}")
            return row
        except SQLAlchemyError as e:
            self.logger.warning(
                "Could not lock studio day %s %s: %s", studio, booking_date.isoformat(), e
            )
            raise RepositoryException(f"Failed to lock studio day: {str(e)}") from e

    def _select_day_lock(self, studio: str, booking_date: date) -> Optional[StudioDayLock]:
        return (
            self.db.query(StudioDayLock)
            .filter(StudioDayLock.studio == studio, StudioDayLock.date == booking_date)
            .with_for_update()
            .first()
        )

    def _create_day_lock(self, studio: str, booking_date: date, *, savepoint: bool) -> None:
        row = StudioDayLock(studio=studio, date=booking_date, created_at=datetime.now())
        if not savepoint:
            # Writers in this process are already serialized by the keyed mutex.
            self.db.add(row)
            self.db.flush()
            return
        try:
            with self.db.begin_nested():
                self.db.add(row)
        except IntegrityError:
            # Another transaction inserted the row first; selecting it below waits on its lock.
            self.logger.debug("Lock row for %s %s created concurrently", studio, booking_date)
