"""Per-request identifiers shared by responses and log records."""

from __future__ import annotations

import contextvars
import logging
import re
import uuid
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

REQUEST_ID_HEADER = "X-Request-ID"

_current_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "clubdocs_request_id", default=None
)

# Client ids are echoed into headers and logs, so only short tokens are kept.
_ACCEPTED_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def get_request_id(default: str | None = None) -> str | None:
    return _current_request_id.get(default)


def accept_request_id(supplied: str | None) -> str:
    """Return the client's id when it is a plain token, else a fresh one."""

    candidate = (supplied or "").strip()
    if _ACCEPTED_ID.fullmatch(candidate):
        return candidate
    return uuid.uuid4().hex


@contextmanager
def bound_request_id(request_id: str) -> Iterator[str]:
    """Make ``request_id`` visible to :func:`get_request_id` inside the block."""

    token = _current_request_id.set(request_id)
    try:
        yield request_id
    finally:
        _current_request_id.reset(token)


class RequestIdLogFilter(logging.Filter):
    """Stamp each record with ``request_id`` (``-`` outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id("-")
        return True


class RequestIdMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER) -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next):
        request_id = accept_request_id(request.headers.get(self.header_name))
        with bound_request_id(request_id):
            response = await call_next(request)
        response.headers[self.header_name] = request_id
        return response


__all__ = [
    "REQUEST_ID_HEADER",
    "RequestIdLogFilter",
    "RequestIdMiddleware",
    "accept_request_id",
    "bound_request_id",
    "get_request_id",
]
