"""Health check response schemas."""

from typing import Literal

from ._strict_base import StrictModel


class HealthResponse(StrictModel):
    status: Literal["healthy", "degraded"]
    service: str
    version: str
    environment: str
    timestamp: str
    database: Literal["ok", "unavailable"]
