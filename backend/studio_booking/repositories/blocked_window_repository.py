"""Repository for blocked windows."""

from datetime import date, time
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.blocked_window import BlockedWindow
from .base_repository import BaseRepository


class BlockedWindowRepository(BaseRepository[BlockedWindow]):
    """Data access helper for admin-blocked windows."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, BlockedWindow)

    def list_blocked(self, studio: str, booking_date: date) -> List[BlockedWindow]:
        try:
            return (
                self.db.query(BlockedWindow)
                .filter(BlockedWindow.studio == studio, BlockedWindow.date == booking_date)
                .order_by(BlockedWindow.start_time)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading blocked windows: {str(e)}")
            raise RepositoryException(f"Failed to load blocked windows: {str(e)}") from e

    def list_range(
        self,
        start_date: date,
        end_date: date,
        studio: Optional[str] = None,
    ) -> List[BlockedWindow]:
        try:
            query = self.db.query(BlockedWindow).filter(
                BlockedWindow.date >= start_date, BlockedWindow.date <= end_date
            )
            if studio:
                query = query.filter(BlockedWindow.studio == studio)
            return query.order_by(
                BlockedWindow.date, BlockedWindow.studio, BlockedWindow.start_time
            ).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading blocked windows: {str(e)}")
            raise RepositoryException(f"Failed to load blocked windows: {str(e)}") from e

    def find_exact(
        self, studio: str, booking_date: date, start_time: time, end_time: time
    ) -> Optional[BlockedWindow]:
        return self.find_one_by(
            studio=studio, date=booking_date, start_time=start_time, end_time=end_time
        )
