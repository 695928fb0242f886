"""Error taxonomy shared by the document services and the HTTP layer."""

from __future__ import annotations

from typing import Any, Dict


class DocumentServiceError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500

    def __init__(self, message: str, extra: Dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra or {}


class ValidationError(DocumentServiceError):
    """Raised for missing or invalid fields, bad file types and unsafe names."""

    status_code = 400


class UploadCancelledError(DocumentServiceError):
    """Raised when the client goes away while an upload is being received."""

    status_code = 400


class AuthError(DocumentServiceError):
    """Raised when login credentials are rejected."""

    status_code = 401


class NotFoundError(DocumentServiceError):
    status_code = 404


class PayloadTooLargeError(DocumentServiceError):
    status_code = 413


class StorageError(DocumentServiceError):
    """Raised when reading or writing the managed directory fails."""

    status_code = 500


__all__ = [
    "AuthError",
    "DocumentServiceError",
    "NotFoundError",
    "PayloadTooLargeError",
    "StorageError",
    "UploadCancelledError",
    "ValidationError",
]
