# backend/studio_booking/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import (
    admin_blocked_windows,
    admin_settings,
    availability,
    bookings,
    health,
    prometheus,
    studios,
)

__all__ = [
    "admin_blocked_windows",
    "admin_settings",
    "availability",
    "bookings",
    "health",
    "prometheus",
    "studios",
]
