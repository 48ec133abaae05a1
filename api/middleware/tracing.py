"""
Request tracing for the Ata Report API.

Every request gets an ID (taken from X-Request-ID when a proxy sent one) that
is echoed back in the response and attached to the access log line, so the
upload, preview and export of one report can be followed through the logs.
"""

import logging
import time
import uuid
import contextvars
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"

access_logger = logging.getLogger("ata_report.api.requests")

_current_request_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    "ata_report_request_id", default=""
)


def get_request_id() -> str:
    """ID of the request being handled, or "" outside a request."""
    return _current_request_id.get()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID and write one access log record for it."""

    async def dispatch(self, request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = _current_request_id.set(request_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        finally:
            _current_request_id.reset(token)

        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
        response.headers[REQUEST_ID_HEADER] = request_id

        access_logger.info(
            "%s %s %s %.1fms",
            request.method, request.url.path, response.status_code, elapsed_ms,
            extra={
                "request_id": request_id,
                "method": request.method,
                "endpoint": request.url.path,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            },
        )
        return response
