"""ASGI middleware utilities for clubdocs."""

from .request_context import RequestIdLogFilter, RequestIdMiddleware, get_request_id
from .security import SecurityHeadersMiddleware

__all__ = [
    "RequestIdLogFilter",
    "RequestIdMiddleware",
    "SecurityHeadersMiddleware",
    "get_request_id",
]
