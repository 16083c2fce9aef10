"""Sentinel rows locked FOR UPDATE to serialize booking writes per studio and date."""

from sqlalchemy import Column, Date, DateTime, String
from sqlalchemy.sql import func

from ..database import Base


class StudioDayLock(Base):
    """
    One row per (studio, date) that has ever been written to.

    The row carries no data; BookingRepository.lock_studio_day selects it
    FOR UPDATE so concurrent transactions on the same day queue up.
    """

    __tablename__ = "studio_day_locks"

    studio = Column(String(100), primary_key=True)
    date = Column(Date, primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
