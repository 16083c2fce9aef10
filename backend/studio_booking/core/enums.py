"""Shared enumerations."""

from enum import Enum


class CallerRole(str, Enum):
    """Role of the caller, as asserted by the trusted gateway."""

    CUSTOMER = "customer"
    STAFF = "staff"
    ADMIN = "admin"

    @property
    def is_privileged(self) -> bool:
        """Staff and admins may book historical slots and bypass availability checks."""
        return self in (CallerRole.STAFF, CallerRole.ADMIN)
