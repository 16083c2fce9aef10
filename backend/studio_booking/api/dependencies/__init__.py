# backend/studio_booking/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_caller_role, require_admin, require_staff
from ...database import get_db
from .services import (
    get_availability_service,
    get_blocked_window_service,
    get_booking_service,
    get_booking_settings_service,
    get_studio_service,
)

__all__ = [
    # Auth
    "get_caller_role",
    "require_admin",
    "require_staff",
    # Database
    "get_db",
    # Services
    "get_availability_service",
    "get_blocked_window_service",
    "get_booking_service",
    "get_booking_settings_service",
    "get_studio_service",
]
