"""Admin credential check backing the login endpoint."""

from __future__ import annotations

import hashlib
import hmac
import logging

from ..config import Settings
from ..utils.errors import AuthError

LOGGER = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Return the hex SHA-256 digest stored in ``ADMIN_PASSWORD_HASH``."""

    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def verify_credentials(*, username: str, password: str, settings: Settings) -> None:
    """Raise :class:`AuthError` unless the credentials match the configured admin."""

    if not settings.admin_username or not settings.admin_password_hash:
        LOGGER.warning("Login attempted but admin credentials are not configured")
        raise AuthError("Invalid credentials")

    username_ok = hmac.compare_digest(
        username.encode("utf-8"), settings.admin_username.encode("utf-8")
    )
    password_ok = hmac.compare_digest(
        hash_password(password).encode("utf-8"),
        settings.admin_password_hash.encode("utf-8"),
    )
    if not (username_ok and password_ok):
        LOGGER.info("Rejected login for %r", username)
        raise AuthError("Invalid credentials")


__all__ = ["hash_password", "verify_credentials"]
