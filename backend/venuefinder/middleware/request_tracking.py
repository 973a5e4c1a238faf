# backend/venuefinder/middleware/request_tracking.py
"""
Request tracking middleware.

- Request ID extracted from X-Request-ID (generated when absent)
- Request ID bound to the logging context for the duration of the request
- Duration and status recorded in Prometheus
"""

import logging
import time
from typing import Callable
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.request_context import reset_request_id, set_request_id
from ..monitoring.prometheus_metrics import record_http_request

logger = logging.getLogger(__name__)


class RequestTrackingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = set_request_id(request_id)
        start_time = time.time()

        endpoint = request.url.path
        try:
            response = await call_next(request)
        except Exception:
            record_http_request(request.method, endpoint, 500, time.time() - start_time)
            raise
        finally:
            reset_request_id(token)

        # Route template keeps label cardinality bounded
        route = request.scope.get("route")
        if route is not None and getattr(route, "path", None):
            endpoint = route.path
        duration = time.time() - start_time
        record_http_request(request.method, endpoint, response.status_code, duration)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time-MS"] = str(int(duration * 1000))
        return response
