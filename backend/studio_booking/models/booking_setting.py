"""Database model for admin-editable booking rules."""

from sqlalchemy import JSON, Column, DateTime, Text
from sqlalchemy.sql import func

from ..database import Base


class BookingSetting(Base):
    """One booking rule (e.g. ``booking_buffer``) stored as a JSON value."""

    __tablename__ = "booking_settings"

    key = Column(Text, primary_key=True, nullable=False)
    value_json = Column(JSON, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<BookingSetting key={self.key}>"


__all__ = ["BookingSetting"]
