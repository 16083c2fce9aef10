# backend/studio_booking/repositories/factory.py
"""
Repository Factory for the studio booking service.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .blocked_window_repository import BlockedWindowRepository
    from .booking_repository import BookingRepository
    from .booking_settings_repository import BookingSettingsRepository
    from .studio_repository import StudioRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_blocked_window_repository(db: Session) -> "BlockedWindowRepository":
        from .blocked_window_repository import BlockedWindowRepository

        return BlockedWindowRepository(db)

    @staticmethod
    def create_booking_settings_repository(db: Session) -> "BookingSettingsRepository":
        from .booking_settings_repository import BookingSettingsRepository

        return BookingSettingsRepository(db)

    @staticmethod
    def create_studio_repository(db: Session) -> "StudioRepository":
        from .studio_repository import StudioRepository

        return StudioRepository(db)
