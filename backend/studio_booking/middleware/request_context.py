# backend/studio_booking/middleware/request_context.py
"""
Request ID middleware.

Takes the caller's X-Request-ID (or generates one), exposes it to log
records through the request context, and echoes it on the response.
"""

import time
from typing import Callable
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.request_context import request_id_scope

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()
        with request_id_scope(request_id):
            response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time-MS"] = str(int((time.time() - start_time) * 1000))
        return response
