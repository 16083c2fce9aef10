# backend/studio_booking/core/exceptions.py
"""
Domain exceptions for the studio booking service.

Services raise these; routes convert them with to_http_exception() and the
app-level handlers render the result as problem+json. Every booking
failure surfaces as one of four stable codes: invalid_interval,
out_of_window, slot_conflict, store_unavailable.
"""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)

# Seconds a client should wait before retrying a store_unavailable failure
STORE_RETRY_AFTER_SECONDS = 2


class DomainException(Exception):
    """Carries a stable machine code plus structured details for the API."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def _detail(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }

    def to_http_exception(self) -> HTTPException:
        """HTTP 500 unless a subclass maps it to something more specific."""
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=self._detail(),
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=self._detail())


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = "not_found",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code, details)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=self._detail())


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=self._detail())


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=HTTP_422_UNPROCESSABLE, detail=self._detail())


class ForbiddenException(DomainException):
    """Raised when the caller role lacks permission for an action."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = "forbidden",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code, details)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=self._detail())


class ServiceException(DomainException):
    """A service operation failed for a reason the caller cannot fix (HTTP 500)."""


# Specific booking exceptions


class InvalidIntervalException(ValidationException):
    """Raised when an interval is empty, reversed, or outside duration/hours limits."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="invalid_interval", details=details)


class OutOfWindowException(ValidationException):
    """Raised when a date is beyond the advance booking window or already elapsed."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="out_of_window", details=details)


class SlotConflictException(ConflictException):
    """Raised when a booking overlaps an occupying booking or a blocked window."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        conflicts: Optional[List[Dict[str, Any]]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        merged: Dict[str, Any] = dict(details or {})
        if conflicts is not None:
            merged["conflicts"] = conflicts
        super().__init__(
            message=message or "This time slot conflicts with an existing booking",
            code="slot_conflict",
            details=merged,
        )


class StoreUnavailableException(ServiceException):
    """Raised when the store or the booking lock cannot be reached in time.

    Safe to retry: nothing was committed.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "Booking store temporarily unavailable. Please retry.",
            code="store_unavailable",
            details=details,
        )

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=self._detail(),
            headers={"Retry-After": str(STORE_RETRY_AFTER_SECONDS)},
        )


class BookingNotModifiableException(BusinessRuleException):
    """Raised when a closed booking (see FINAL_STATUSES) is edited or cancelled."""

    def __init__(self, booking_id: str, booking_status: str):
        super().__init__(
            message=f"Booking in status '{booking_status}' cannot be modified",
            code="booking_not_modifiable",
            details={"booking_id": booking_id, "status": booking_status},
        )


class RepositoryException(Exception):
    """A read, flush or lock inside the data layer failed."""


def is_lock_timeout(exc: Exception) -> bool:
    """Check if an exception was raised by a lock wait that gave up."""
    error_str = str(exc).lower()
    return (
        "lock timeout" in error_str
        or "lock_timeout" in error_str
        or "could not obtain lock" in error_str
        or "database is locked" in error_str
    )
