"""
Checkstate: Request ID Middleware
===================================

What:  Tags every request with an ID and returns it in X-Request-ID.
How:   The browser page may send its own X-Request-ID; otherwise the first
       8 characters of a uuid4 are used. Client values longer than
       MAX_REQUEST_ID_LENGTH are cut to that length, since the ID is
       written into every access-log and error-log line.

Where the ID shows up:
    - checkstate.access lines from RequestLoggingMiddleware
    - "[<id>] Validation error" / "[<id>] Storage error" lines written by
      the exception handlers in main.py, next to the OS error and path
    - the X-Request-ID response header, including on 400/500 answers

Error bodies are fixed plain-text messages ("Failed to create file"), so
the header is how a client ties a failed toggle to the server log entry
that holds the OS detail.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

MAX_REQUEST_ID_LENGTH = 64

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(header_value: str) -> str:
    """Client-supplied ID (trimmed and capped) or a fresh short uuid4."""
    rid = header_value.strip()[:MAX_REQUEST_ID_LENGTH]
    return rid or str(uuid.uuid4())[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Publishes the request ID to request_id_var and request.state for the
    duration of the request, then stamps it on the response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get("X-Request-ID", ""))
        token = request_id_var.set(rid)
        request.state.request_id = rid

        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
