"""
Prometheus scrape endpoint.

Public like any scrape target; it carries request, service-operation,
lock and booking-outcome metrics.
"""

from fastapi import APIRouter, Response

from ...monitoring.prometheus_metrics import prometheus_metrics

router = APIRouter(tags=["monitoring"])


@router.get("")
def get_prometheus_metrics() -> Response:
    payload, content_type = prometheus_metrics.render()
    return Response(
        content=payload,
        media_type=content_type,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )
