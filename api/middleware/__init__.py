"""Middleware for the Ata Report API"""

from .tracing import REQUEST_ID_HEADER, RequestIDMiddleware, get_request_id

__all__ = ["REQUEST_ID_HEADER", "RequestIDMiddleware", "get_request_id"]
