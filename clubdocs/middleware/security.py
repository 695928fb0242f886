"""Default response hardening headers."""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

# Stored documents are user supplied; never let a browser run them as a page.
DOCUMENT_CSP = "default-src 'none'; style-src 'unsafe-inline'; img-src 'self'; sandbox"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach ``nosniff``, framing and content-security headers to every response."""

    def __init__(
        self, app: ASGIApp, *, content_security_policy: str | None = DOCUMENT_CSP
    ) -> None:
        super().__init__(app)
        self._content_security_policy = content_security_policy

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        headers = response.headers
        headers.setdefault("X-Content-Type-Options", "nosniff")
        headers.setdefault("X-Frame-Options", "DENY")
        headers.setdefault("Referrer-Policy", "no-referrer")
        if self._content_security_policy and request.method == "GET":
            headers.setdefault("Content-Security-Policy", self._content_security_policy)
        return response


__all__ = ["DOCUMENT_CSP", "SecurityHeadersMiddleware"]
