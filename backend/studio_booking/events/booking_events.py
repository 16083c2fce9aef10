"""Booking domain events, dispatched only after the booking transaction commits."""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, time
from typing import Any, Dict, Optional


def _jsonable(value: Any) -> Any:
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _jsonable(inner) for key, inner in value.items()}
    return value


@dataclass(frozen=True)
class BookingEvent:
    booking_id: str
    studio: str
    date: date
    start_time: time
    end_time: time
    phone_number: str
    actor_role: str
    occurred_at: datetime

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        payload = {key: _jsonable(value) for key, value in asdict(self).items()}
        payload["event_type"] = self.event_type
        return payload


@dataclass(frozen=True)
class BookingCreated(BookingEvent):
    """Fired after a booking is committed."""

    name: Optional[str] = None
    email: Optional[str] = None
    total_amount: Optional[int] = None
    skipped_validation: bool = False


@dataclass(frozen=True)
class BookingUpdated(BookingEvent):
    """Fired after a booking edit is committed."""

    changed_fields: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BookingCancelled(BookingEvent):
    """Fired after a booking is cancelled."""

    reason: Optional[str] = None
