# backend/studio_booking/middleware/prometheus_middleware.py
"""
Prometheus metrics middleware for HTTP request tracking.
"""

import re
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..monitoring.prometheus_metrics import prometheus_metrics

METRICS_PATH = "/api/v1/metrics/prometheus"

_ULID_SEGMENT = re.compile(r"^[0-9A-HJKMNP-TV-Z]{26}$")


def normalize_path(raw_path: str) -> str:
    """Replace id segments so /bookings/<ulid> collapses to /bookings/:id."""
    return "/".join(
        ":id" if segment.isdigit() or _ULID_SEGMENT.match(segment) else segment
        for segment in raw_path.split("/")
    )


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Skip the scrape endpoint itself
        if request.url.path == METRICS_PATH:
            return await call_next(request)

        path = normalize_path(request.url.path)
        start_time = time.time()
        response = await call_next(request)
        prometheus_metrics.record_http_request(
            method=request.method,
            endpoint=path,
            duration=time.time() - start_time,
            status_code=response.status_code,
        )
        return response
