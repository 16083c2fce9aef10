"""Studio (bookable room) reference data."""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String, Time
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Studio(Base):
    """A physical room. The unique ``name`` is the identifier used by bookings."""

    __tablename__ = "studios"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name = Column(String(100), nullable=False, unique=True, index=True)
    studio_type = Column(String(100), nullable=True)
    capacity = Column(Integer, nullable=True)
    hourly_rate = Column(Integer, nullable=False, default=0)
    # Own opening hours; None falls back to the booking settings
    open_time = Column(Time, nullable=True)
    close_time = Column(Time, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("hourly_rate >= 0", name="ck_studios_rate_non_negative"),
        CheckConstraint("capacity IS NULL OR capacity > 0", name="ck_studios_capacity_positive"),
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Studio {self.name} active={self.is_active}>"
