"""Repository for booking setting records."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, cast

from sqlalchemy.orm import Session

from ..models.booking_setting import BookingSetting


class BookingSettingsRepository:
    """Data access helper for booking rule key/value records."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_by_key(self, key: str) -> Optional[BookingSetting]:
        result = self.db.query(BookingSetting).filter(BookingSetting.key == key).first()
        return cast(Optional[BookingSetting], result)

    def get_all(self) -> Dict[str, BookingSetting]:
        return {record.key: record for record in self.db.query(BookingSetting).all()}

    def upsert(self, *, key: str, value: Any, updated_at: datetime) -> BookingSetting:
        record = self.get_by_key(key)
        if record is None:
            record = BookingSetting(key=key, value_json=value, updated_at=updated_at)
            self.db.add(record)
        else:
            record.value_json = value
            record.updated_at = updated_at
        self.db.flush()
        return record


__all__ = ["BookingSettingsRepository"]
