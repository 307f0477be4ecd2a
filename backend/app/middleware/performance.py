# backend/app/middleware/performance.py
"""
Request id and timing for every API call.

The id comes from the caller's X-Request-ID header when present (the mobile
apps send one per tap so support can match client and server logs), else a
fresh ULID. It is echoed back and stamped on every log line of the request.
"""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import ulid

from ..core.request_context import reset_request_id, set_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_THRESHOLD_MS = 1000
_MAX_REQUEST_ID_LENGTH = 128


class PerformanceMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
        request_id = incoming[:_MAX_REQUEST_ID_LENGTH] or str(ulid.ULID())
        request.state.request_id = request_id
        token = set_request_id(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            response.headers[REQUEST_ID_HEADER] = request_id
            response.headers["X-Response-Time-MS"] = str(int(elapsed_ms))
            if elapsed_ms > SLOW_REQUEST_THRESHOLD_MS:
                logger.warning(
                    f"Slow request: {request.method} {request.url.path} took {elapsed_ms:.0f}ms"
                )
            return response
        finally:
            reset_request_id(token)
