# backend/studio_booking/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.availability_service import AvailabilityService
from ...services.blocked_window_service import BlockedWindowService
from ...services.booking_service import BookingService
from ...services.booking_settings_service import BookingSettingsService
from ...services.studio_service import StudioService
from ...database import get_db


def get_booking_settings_service(db: Session = Depends(get_db)) -> BookingSettingsService:
    return BookingSettingsService(db)


def get_availability_service(
    db: Session = Depends(get_db),
    settings_service: BookingSettingsService = Depends(get_booking_settings_service),
) -> AvailabilityService:
    """Get AvailabilityService sharing the request's settings service."""
    return AvailabilityService(db, settings_service=settings_service)


def get_booking_service(
    db: Session = Depends(get_db),
    settings_service: BookingSettingsService = Depends(get_booking_settings_service),
) -> BookingService:
    """
    Get booking service instance.

    Args:
        db: Database session
        settings_service: Source of the booking rules

    Returns:
        BookingService instance
    """
    return BookingService(db, settings_service=settings_service)


def get_blocked_window_service(db: Session = Depends(get_db)) -> BlockedWindowService:
    return BlockedWindowService(db)


def get_studio_service(db: Session = Depends(get_db)) -> StudioService:
    return StudioService(db)
