# backend/studio_booking/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    GET / - Bookings of a studio on a date (staff)
    POST / - Create a booking
    GET /{booking_id} - Booking details
    PUT /{booking_id} - Edit a booking (staff)
    POST /{booking_id}/cancel - Cancel a booking
"""

import asyncio
import datetime as dt
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.params import Path

from ...api.dependencies import get_booking_service, get_caller_role, require_staff
from ...core.enums import CallerRole
from ...core.exceptions import DomainException, NotFoundException
from ...models.booking import BookingStatus
from ...schemas.booking import (
    BookingCancelRequest,
    BookingCreate,
    BookingResponse,
    BookingUpdate,
    normalize_phone_number,
)
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# ============================================================================
# SECTION 1: Collection routes
# ============================================================================


@router.get("", response_model=List[BookingResponse])
async def list_bookings(
    studio: str = Query(..., min_length=1, max_length=100),
    booking_date: dt.date = Query(..., alias="date"),
    booking_status: Optional[BookingStatus] = Query(None, alias="status"),
    _: CallerRole = Depends(require_staff),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    """List every booking of a studio on a date, ordered by start time."""
    try:
        bookings = await asyncio.to_thread(
            booking_service.list_bookings_for_day, studio, booking_date, booking_status
        )
        return [BookingResponse.model_validate(booking) for booking in bookings]
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "invalid_interval or out_of_window"},
        403: {"description": "Privileged flag used by a customer"},
        409: {"description": "slot_conflict"},
        503: {"description": "store_unavailable, safe to retry"},
    },
)
async def create_booking(
    booking_data: BookingCreate,
    caller_role: CallerRole = Depends(get_caller_role),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """
    Create a confirmed booking.

    The interval is re-checked under the studio/date lock; of two
    overlapping requests exactly one succeeds and the other gets 409.
    """
    try:
        booking = await asyncio.to_thread(
            booking_service.create_booking,
            booking_data.studio,
            booking_data.date,
            booking_data.start_time,
            booking_data.end_time,
            booking_data.customer_info(),
            booking_data.booking_metadata(),
            caller_role=caller_role,
            skip_validation=booking_data.skip_validation,
            allow_past_slots=booking_data.allow_past_slots,
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 2: Dynamic routes (with path parameters - placed last)
# ============================================================================


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def get_booking(
    booking_id: str = Path(..., description="Booking ULID", pattern=ULID_PATH_PATTERN),
    phone_number: Optional[str] = Query(
        None, description="Phone number on the booking (required for customers)"
    ),
    caller_role: CallerRole = Depends(get_caller_role),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Get booking details. Customers only see bookings made with their phone number."""
    try:
        booking = await asyncio.to_thread(booking_service.get_booking, booking_id)
        if not caller_role.is_privileged:
            try:
                owner_phone = normalize_phone_number(phone_number) if phone_number else None
            except ValueError:
                owner_phone = None
            if owner_phone != booking.phone_number:
                raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.put(
    "/{booking_id}",
    response_model=BookingResponse,
    responses={
        404: {"description": "Booking not found"},
        409: {"description": "slot_conflict"},
        422: {"description": "Booking is already closed"},
    },
)
async def update_booking(
    update_data: BookingUpdate,
    booking_id: str = Path(..., description="Booking ULID", pattern=ULID_PATH_PATTERN),
    caller_role: CallerRole = Depends(require_staff),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Edit a booking. Schedule changes are re-checked like a new booking."""
    try:
        booking = await asyncio.to_thread(
            booking_service.update_booking, booking_id, update_data, caller_role=caller_role
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    responses={
        400: {"description": "Booking already started"},
        404: {"description": "Booking not found"},
        422: {"description": "Booking is already closed"},
    },
)
async def cancel_booking(
    cancel_data: BookingCancelRequest,
    booking_id: str = Path(..., description="Booking ULID", pattern=ULID_PATH_PATTERN),
    caller_role: CallerRole = Depends(get_caller_role),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Cancel a booking and free its slot."""
    try:
        booking = await asyncio.to_thread(
            booking_service.cancel_booking,
            booking_id,
            caller_role=caller_role,
            reason=cancel_data.reason,
            phone_number=cancel_data.phone_number,
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)
