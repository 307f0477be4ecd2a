"""
HTTP request metrics.

Requests are labelled with the route template (``/api/v1/lessons/{lesson_id}``)
rather than the raw path so each lesson or instructor id does not become its
own time series.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..monitoring.prometheus_metrics import prometheus_metrics

UNMATCHED_ROUTE = "unmatched"


def route_label(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        # the route is only known once routing ran; in-flight requests are tracked per method
        prometheus_metrics.track_http_request_start(method, "*")
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            prometheus_metrics.record_http_request(
                method=method,
                endpoint=route_label(request),
                duration=time.perf_counter() - started,
                status_code=status_code,
            )
            prometheus_metrics.track_http_request_end(method, "*")
