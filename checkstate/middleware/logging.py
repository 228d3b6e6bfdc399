"""
Checkstate: Request Logging Middleware
========================================

What:  One access-log line per request on the "checkstate.access" logger.
How:   Measures the time spent downstream and logs method, path, status,
       duration, request ID and client IP. Request bodies are never logged.

Log level by status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from checkstate.middleware.request_id import request_id_var

logger = logging.getLogger("checkstate.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its outcome and duration. /health is skipped."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        # Probes run every few seconds
        if path == "/health":
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
