# backend/studio_booking/services/booking_settings_service.py
"""
Booking rules service.

Rules live as key/JSON rows and are read fresh on every call. A missing or
malformed key falls back to its default so one bad row never blocks booking.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..core.constants import BOOKING_SETTINGS_DEFAULTS
from ..core.exceptions import ValidationException
from ..repositories.factory import RepositoryFactory
from ..schemas.booking_settings import BookingSettings, BookingSettingsUpdate
from .base import BaseService

logger = logging.getLogger(__name__)


def _as_number(raw: Any) -> float:
    if isinstance(raw, bool):
        raise ValueError("boolean is not a number")
    if isinstance(raw, (int, float)):
        return raw
    return float(str(raw).strip().strip('"'))


def _as_int(raw: Any) -> int:
    value = _as_number(raw)
    if int(value) != value:
        raise ValueError(f"expected whole number, got {raw!r}")
    return int(value)


def _as_time_str(raw: Any) -> str:
    return str(raw).strip().strip('"')


_COERCERS: Dict[str, Callable[[Any], Any]] = {
    "min_booking_duration": _as_number,
    "max_booking_duration": _as_number,
    "booking_buffer": _as_int,
    "advance_booking_days": _as_int,
    "default_open_time": _as_time_str,
    "default_close_time": _as_time_str,
}


class BookingSettingsService(BaseService):
    """
    Reads and writes the admin-editable booking rules.

    Settings are read fresh on every call and handed to callers as an
    immutable BookingSettings value; nothing is cached between requests.
    """

    def __init__(self, db: Session) -> None:
        super().__init__(db)
        self.repo = RepositoryFactory.create_booking_settings_repository(db)

    @BaseService.measure_operation("get_booking_settings")
    def get_booking_settings(self) -> BookingSettings:
        settings, _ = self._load()
        return settings

    def get_booking_settings_with_timestamp(self) -> Tuple[BookingSettings, Optional[datetime]]:
        return self._load()

    @BaseService.measure_operation("update_booking_settings")
    def update_booking_settings(
        self, payload: BookingSettingsUpdate
    ) -> Tuple[BookingSettings, datetime]:
        """
        Apply a partial update, validating the merged result.

        Raises:
            ValidationException: If the merged settings are inconsistent
                (e.g. min above max, open not before close)
        """
        current, _ = self._load()
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        merged_input = {**current.model_dump(), **changes}

        try:
            merged = BookingSettings(**merged_input)
        except ValidationError as exc:
            raise ValidationException(
                "Invalid booking settings",
                code="invalid_settings",
                details={"errors": [err["msg"] for err in exc.errors()]},
            ) from exc
        if merged.open_minutes >= merged.close_minutes:
            raise ValidationException(
                "default_open_time must be before default_close_time",
                code="invalid_settings",
                details={
                    "default_open_time": merged.default_open_time.strftime("%H:%M"),
                    "default_close_time": merged.default_close_time.strftime("%H:%M"),
                },
            )

        now = datetime.now(timezone.utc)
        stored = merged.model_dump(mode="json")
        with self.transaction():
            for key in changes:
                self.repo.upsert(key=key, value=stored[key], updated_at=now)

        self.log_operation("update_booking_settings", keys=sorted(changes))
        return merged, now

    def _load(self) -> Tuple[BookingSettings, Optional[datetime]]:
        records = self.repo.get_all()
        values: Dict[str, Any] = {}
        latest: Optional[datetime] = None

        for key, coerce in _COERCERS.items():
            record = records.get(key)
            if record is None:
                continue
            try:
                values[key] = coerce(record.value_json)
            except (TypeError, ValueError):
                logger.warning(
                    "Malformed booking setting %s=%r, using default %r",
                    key,
                    record.value_json,
                    BOOKING_SETTINGS_DEFAULTS[key],
                )
                continue
            if record.updated_at is not None and (latest is None or record.updated_at > latest):
                latest = record.updated_at

        try:
            return BookingSettings(**values), latest
        except ValidationError as exc:
            logger.warning(
                "Stored booking settings are inconsistent (%s), falling back per key", exc
            )

        # Keep every key that is valid on its own.
        settings = BookingSettings()
        for key, value in values.items():
            try:
                settings = BookingSettings(**{**settings.model_dump(), key: value})
            except ValidationError:
                logger.warning("Ignoring booking setting %s=%r", key, value)
        return settings, latest
