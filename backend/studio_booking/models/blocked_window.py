"""Blocked windows: intervals an administrator has taken out of sale."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.sql import func
import ulid

from ..database import Base


class BlockedWindow(Base):
    """A [start_time, end_time) interval of one studio on one date that cannot be booked."""

    __tablename__ = "blocked_windows"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    studio = Column(String(100), ForeignKey("studios.name"), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    reason = Column(Text, nullable=True)
    created_by = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint(
            "studio", "date", "start_time", "end_time", name="uq_blocked_windows_exact"
        ),
        CheckConstraint("end_time > start_time", name="ck_blocked_windows_time_order"),
        Index("ix_blocked_windows_studio_date", "studio", "date"),
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return (
            f"<BlockedWindow {self.studio} {self.date} {self.start_time}-{self.end_time}>"
        )
