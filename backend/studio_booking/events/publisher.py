"""Post-commit dispatcher for booking events."""

from __future__ import annotations

import logging
from typing import Callable, List, Sequence

from ..monitoring.prometheus_metrics import prometheus_metrics
from .booking_events import BookingEvent

logger = logging.getLogger(__name__)

BookingEventListener = Callable[[BookingEvent], None]


class BookingEventPublisher:
    """
    Registry of listeners that react to committed booking changes.

    Notification senders (email, WhatsApp, calendar sync) register here.
    A failing listener is logged and skipped; it never affects the booking
    that has already been committed, nor the other listeners.
    """

    _listeners: List[BookingEventListener] = []

    @classmethod
    def register(cls, listener: BookingEventListener) -> None:
        cls._listeners.append(listener)

    @classmethod
    def unregister(cls, listener: BookingEventListener) -> None:
        cls._listeners = [existing for existing in cls._listeners if existing is not listener]

    @classmethod
    def clear(cls) -> None:
        cls._listeners = []

    @classmethod
    def listeners(cls) -> Sequence[BookingEventListener]:
        return tuple(cls._listeners)

    @classmethod
    def publish(cls, event: BookingEvent) -> None:
        for listener in list(cls._listeners):
            try:
                listener(event)
            except Exception:
                prometheus_metrics.record_listener_failure(event.event_type)
                logger.exception(
                    "Booking event listener %r failed for %s %s",
                    listener,
                    event.event_type,
                    event.booking_id,
                )
        logger.info("booking_event=%s payload=%s", event.event_type, event.to_dict())
