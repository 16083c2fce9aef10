"""
Problem+json error rendering.

Every error response carries the stable ``code`` the services raised,
the request id for correlation, and (for validation failures) the
field-level ``errors`` list.
"""

from http import HTTPStatus
import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.exceptions import (
    STORE_RETRY_AFTER_SECONDS,
    DomainException,
    RepositoryException,
    is_lock_timeout,
)
from .core.request_context import current_request_id
from .monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"


def endpoint_label(request: Request) -> str:
    """Route template for metric labels, so ids do not explode cardinality."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def _split_detail(detail: Any) -> Tuple[Optional[str], Optional[str], Optional[Any]]:
    """(message, code, errors) from an HTTPException detail of any shape."""
    if isinstance(detail, dict):
        code = detail.get("code")
        message = detail.get("message") or detail.get("detail")
        return (
            message if isinstance(message, str) else None,
            code if isinstance(code, str) else None,
            detail.get("details") or detail.get("errors"),
        )
    if detail is None:
        return None, None, None
    return str(detail), None, None


def problem_response(
    request: Request,
    status: int,
    *,
    detail: Optional[str] = None,
    code: Optional[str] = None,
    errors: Optional[Any] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    try:
        title = HTTPStatus(status).phrase
    except ValueError:
        title = "Error"

    body: Dict[str, Any] = {
        "type": "about:blank",
        "title": title,
        "status": status,
        "detail": detail or "",
        "instance": request.url.path,
    }
    if code:
        body["code"] = code
        prometheus_metrics.record_error(code, endpoint_label(request))
    request_id = current_request_id()
    if request_id:
        body["request_id"] = request_id
    if errors is not None:
        body["errors"] = jsonable_encoder(errors)

    return JSONResponse(
        body,
        status_code=status,
        media_type=PROBLEM_MEDIA_TYPE,
        headers=dict(headers) if headers else None,
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        message, code, errors = _split_detail(exc.detail)
        return problem_response(
            request,
            exc.status_code,
            detail=message,
            code=code,
            errors=errors,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        return await http_exception_handler(request, exc.to_http_exception())

    @app.exception_handler(RepositoryException)
    async def repository_exception_handler(
        request: Request, exc: RepositoryException
    ) -> JSONResponse:
        logger.error("Store failure on %s: %s", request.url.path, exc)
        return problem_response(
            request,
            503,
            detail=(
                "Booking store busy. Please retry."
                if is_lock_timeout(exc)
                else "Booking store temporarily unavailable. Please retry."
            ),
            code="store_unavailable",
            headers={"Retry-After": str(STORE_RETRY_AFTER_SECONDS)},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return problem_response(
            request,
            422,
            detail="Request validation failed",
            code="validation_error",
            errors=exc.errors(),
        )
