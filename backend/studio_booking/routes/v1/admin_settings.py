# backend/studio_booking/routes/v1/admin_settings.py
"""
Admin booking rules - API v1

Endpoints:
    GET / - Current booking rules
    PUT / - Partial update of booking rules
"""

import asyncio
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, status

from ...api.dependencies import get_booking_settings_service, require_admin
from ...core.enums import CallerRole
from ...core.exceptions import DomainException
from ...schemas.booking_settings import BookingSettingsResponse, BookingSettingsUpdate
from ...services.booking_settings_service import BookingSettingsService

router = APIRouter(tags=["admin-settings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("", response_model=BookingSettingsResponse)
async def get_booking_settings(
    _: CallerRole = Depends(require_admin),
    settings_service: BookingSettingsService = Depends(get_booking_settings_service),
) -> BookingSettingsResponse:
    current, updated_at = await asyncio.to_thread(
        settings_service.get_booking_settings_with_timestamp
    )
    return BookingSettingsResponse(settings=current, updated_at=updated_at)


@router.put("", response_model=BookingSettingsResponse)
async def update_booking_settings(
    payload: BookingSettingsUpdate,
    _: CallerRole = Depends(require_admin),
    settings_service: BookingSettingsService = Depends(get_booking_settings_service),
) -> BookingSettingsResponse:
    """
    Update booking rules. Omitted fields keep their value.

    Changes apply to the next request; existing bookings are not re-validated.
    """
    try:
        merged, updated_at = await asyncio.to_thread(
            settings_service.update_booking_settings, payload
        )
        return BookingSettingsResponse(settings=merged, updated_at=updated_at)
    except DomainException as e:
        handle_domain_exception(e)
