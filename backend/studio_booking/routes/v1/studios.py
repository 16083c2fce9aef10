# backend/studio_booking/routes/v1/studios.py
"""
Studio catalog routes - API v1

Endpoints:
    GET / - Active studios
"""

import asyncio
from typing import List

from fastapi import APIRouter, Depends

from ...api.dependencies import get_studio_service
from ...schemas.studio import StudioResponse
from ...services.studio_service import StudioService

router = APIRouter(tags=["studios-v1"])


@router.get("", response_model=List[StudioResponse])
async def list_studios(
    studio_service: StudioService = Depends(get_studio_service),
) -> List[StudioResponse]:
    studios = await asyncio.to_thread(studio_service.list_studios)
    return [StudioResponse.model_validate(studio) for studio in studios]
