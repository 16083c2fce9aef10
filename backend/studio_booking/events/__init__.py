"""Booking events and their post-commit publisher."""

from .booking_events import BookingCancelled, BookingCreated, BookingEvent, BookingUpdated
from .publisher import BookingEventListener, BookingEventPublisher

__all__ = [
    "BookingCancelled",
    "BookingCreated",
    "BookingEvent",
    "BookingEventListener",
    "BookingEventPublisher",
    "BookingUpdated",
]
