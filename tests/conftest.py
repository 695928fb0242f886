"""Test configuration for clubdocs."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Generator

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from clubdocs.config import reset_settings_cache  # noqa: E402
from clubdocs.observability import metrics_registry  # noqa: E402
from clubdocs.services.auth import hash_password  # noqa: E402

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct horse battery staple"
ALLOWED_ORIGIN = "https://cybersec-ucalgary.club"


@pytest.fixture(autouse=True)
def _isolate_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    """Point storage at a per-test directory and reset cached state."""

    monkeypatch.setenv("STORAGE_ROOT", str(tmp_path / "storage"))
    monkeypatch.setenv("MAX_UPLOAD_SIZE", str(1024))
    monkeypatch.setenv("WRITEUP_EXTENSIONS", "md,txt")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", ALLOWED_ORIGIN)
    monkeypatch.setenv("ADMIN_USERNAME", ADMIN_USERNAME)
    monkeypatch.setenv("ADMIN_PASSWORD_HASH", hash_password(ADMIN_PASSWORD))
    reset_settings_cache()
    metrics_registry.reset()
    yield
    reset_settings_cache()
    metrics_registry.reset()


@pytest.fixture()
def storage_root(tmp_path: Path) -> Path:
    return tmp_path / "storage"


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    """Return a test client for the FastAPI application."""

    from clubdocs.main import app

    with TestClient(app) as test_client:
        yield test_client
