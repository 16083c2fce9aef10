# backend/studio_booking/routes/v1/admin_blocked_windows.py
"""
Admin blocked windows - API v1

Endpoints:
    GET / - Blocked windows in a date range
    POST / - Block a window
    POST /bulk - Block one window on many dates
    DELETE /{window_id} - Unblock a window
"""

import asyncio
import datetime as dt
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.params import Path

from ...api.dependencies import get_blocked_window_service, require_admin
from ...core.enums import CallerRole
from ...core.exceptions import DomainException
from ...schemas.blocked_window import (
    BlockedWindowBulkCreate,
    BlockedWindowBulkResponse,
    BlockedWindowCreate,
    BlockedWindowResponse,
    SkippedDate,
)
from ...services.blocked_window_service import BlockedWindowService

router = APIRouter(tags=["admin-blocked-windows-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


def handle_domain_exception(exc: DomainException) -> NoReturn:
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("", response_model=List[BlockedWindowResponse])
async def list_blocked_windows(
    start_date: dt.date = Query(...),
    end_date: Optional[dt.date] = Query(None, description="Defaults to start_date"),
    studio: Optional[str] = Query(None, max_length=100),
    _: CallerRole = Depends(require_admin),
    service: BlockedWindowService = Depends(get_blocked_window_service),
) -> List[BlockedWindowResponse]:
    try:
        windows = await asyncio.to_thread(
            service.list_blocked_windows, start_date, end_date, studio
        )
        return [BlockedWindowResponse.model_validate(window) for window in windows]
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "",
    response_model=BlockedWindowResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Window already blocked"}},
)
async def create_blocked_window(
    payload: BlockedWindowCreate,
    caller_role: CallerRole = Depends(require_admin),
    service: BlockedWindowService = Depends(get_blocked_window_service),
) -> BlockedWindowResponse:
    try:
        window = await asyncio.to_thread(
            service.create_blocked_window, payload, caller_role.value
        )
        return BlockedWindowResponse.model_validate(window)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/bulk",
    response_model=BlockedWindowBulkResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Every requested date is in the past"},
        409: {"description": "No requested date could be blocked"},
    },
)
async def create_blocked_windows_bulk(
    payload: BlockedWindowBulkCreate,
    caller_role: CallerRole = Depends(require_admin),
    service: BlockedWindowService = Depends(get_blocked_window_service),
) -> BlockedWindowBulkResponse:
    try:
        result = await asyncio.to_thread(
            service.create_blocked_windows_bulk, payload, caller_role.value
        )
        return BlockedWindowBulkResponse(
            created=[BlockedWindowResponse.model_validate(w) for w in result.created],
            skipped=[SkippedDate(date=day, reason=why) for day, why in result.skipped],
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{window_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_blocked_window(
    window_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    _: CallerRole = Depends(require_admin),
    service: BlockedWindowService = Depends(get_blocked_window_service),
) -> Response:
    try:
        await asyncio.to_thread(service.delete_blocked_window, window_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)
