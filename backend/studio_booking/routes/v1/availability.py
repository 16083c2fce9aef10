# backend/studio_booking/routes/v1/availability.py
"""
Availability routes - API v1

Endpoints:
    GET / - Slot grid for one studio and date
"""

import asyncio
import datetime as dt
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...api.dependencies import get_availability_service, get_caller_role
from ...core.enums import CallerRole
from ...core.exceptions import DomainException
from ...schemas.availability import AvailabilityResponse
from ...services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get(
    "",
    response_model=AvailabilityResponse,
    responses={
        400: {"description": "Date beyond the advance booking window"},
        403: {"description": "allow_past_slots used by a customer"},
        404: {"description": "Studio not found"},
    },
)
async def get_availability(
    studio: str = Query(..., min_length=1, max_length=100, description="Studio name"),
    booking_date: dt.date = Query(..., alias="date", description="Date in the studio timezone"),
    allow_past_slots: bool = Query(False, description="Keep elapsed slots available (staff)"),
    granularity: Optional[int] = Query(
        None,
        ge=5,
        le=240,
        description="Slot width in minutes, clamped to the booking duration limits",
    ),
    caller_role: CallerRole = Depends(get_caller_role),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    """
    Get the full slot grid of a studio on a date.

    Every slot between opening and closing time is returned, flagged
    ``available`` or carrying the reason it is not (blocked, booked, past).
    """
    try:
        return await asyncio.to_thread(
            availability_service.get_availability,
            studio,
            booking_date,
            granularity_minutes=granularity,
            allow_past_slots=allow_past_slots,
            caller_role=caller_role,
        )
    except DomainException as e:
        handle_domain_exception(e)
