"""Configuration utilities for the clubdocs service."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

BASE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = BASE_DIR.parent
DEFAULT_STORAGE_ROOT = PROJECT_ROOT / "storage"
DEFAULT_CORS_ORIGIN = "https://cybersec-ucalgary.club"


def _load_environment() -> None:
    """Load environment variables from a ``.env`` file if present."""

    explicit_path = os.getenv("CLUBDOCS_ENV_FILE")
    candidates = []

    if explicit_path:
        candidates.append(Path(explicit_path))

    candidates.append(PROJECT_ROOT / ".env")

    for candidate in candidates:
        try_path = candidate.expanduser()
        if try_path.exists():
            load_dotenv(try_path, override=False)


_load_environment()


def _split_csv(raw: str | None) -> Tuple[str, ...]:
    """Return the non-blank items of a comma-delimited string."""

    if not raw:
        return ()
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _optional_env(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


class Settings(BaseModel):
    """Application configuration loaded from environment variables."""

    # Every field is filled by a default factory; run the validators on those too.
    model_config = ConfigDict(validate_default=True)

    storage_root: Path = Field(
        default_factory=lambda: Path(
            os.getenv("STORAGE_ROOT", str(DEFAULT_STORAGE_ROOT))
        )
    )
    max_upload_size: int = Field(
        default_factory=lambda: int(os.getenv("MAX_UPLOAD_SIZE", str(25 * 1024 * 1024)))
    )
    writeup_extensions: Tuple[str, ...] = Field(
        default_factory=lambda: _split_csv(os.getenv("WRITEUP_EXTENSIONS", "md,txt"))
    )
    admin_username: str | None = Field(
        default_factory=lambda: _optional_env("ADMIN_USERNAME")
    )
    admin_password_hash: str | None = Field(
        default_factory=lambda: _optional_env("ADMIN_PASSWORD_HASH")
    )
    cors_allow_origins: Tuple[str, ...] = Field(
        default_factory=lambda: _split_csv(
            os.getenv("CORS_ALLOW_ORIGINS", DEFAULT_CORS_ORIGIN)
        )
    )
    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: int(os.getenv("PORT", "5000")))
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "info"))

    @field_validator("storage_root", mode="after")
    @classmethod
    def _resolve_storage_root(cls, value: Path) -> Path:
        value = value.expanduser()
        if not value.is_absolute():
            value = (PROJECT_ROOT / value).resolve()
        value.mkdir(parents=True, exist_ok=True)
        return value

    @field_validator("writeup_extensions", mode="after")
    @classmethod
    def _normalise_extensions(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        cleaned = tuple(
            dict.fromkeys(item.lower().lstrip(".") for item in value if item.strip("."))
        )
        return cleaned or ("md", "txt")

    @field_validator("admin_password_hash", mode="after")
    @classmethod
    def _normalise_hash(cls, value: str | None) -> str | None:
        return value.lower() if value else value

    @field_validator("max_upload_size", mode="after")
    @classmethod
    def _positive_upload_size(cls, value: int) -> int:
        return max(1, value)


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the cached settings so that subsequent calls reload from the environment."""

    get_settings.cache_clear()


__all__ = [
    "DEFAULT_CORS_ORIGIN",
    "PROJECT_ROOT",
    "Settings",
    "get_settings",
    "reset_settings_cache",
]
