"""
Repository layer for the studio booking service.

Repositories wrap SQLAlchemy queries and never commit; services own
the transaction boundary.
"""

from .base_repository import BaseRepository
from .blocked_window_repository import BlockedWindowRepository
from .booking_repository import BookingRepository
from .booking_settings_repository import BookingSettingsRepository
from .factory import RepositoryFactory
from .studio_repository import StudioRepository

__all__ = [
    "BaseRepository",
    "BlockedWindowRepository",
    "BookingRepository",
    "BookingSettingsRepository",
    "RepositoryFactory",
    "StudioRepository",
]
