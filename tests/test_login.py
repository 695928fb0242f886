"""Tests for the admin login endpoint."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from clubdocs.config import reset_settings_cache

from .conftest import ADMIN_PASSWORD, ADMIN_USERNAME


def test_valid_credentials_succeed(client: TestClient) -> None:
    response = client.post(
        "/api/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}
    )

    assert response.status_code == 200
    assert response.json() == {"success": True}


@pytest.mark.parametrize(
    "payload",
    [
        {"username": ADMIN_USERNAME, "password": "wrong"},
        {"username": "root", "password": ADMIN_PASSWORD},
        {},
    ],
)
def test_invalid_credentials_are_unauthorised(client: TestClient, payload: dict) -> None:
    response = client.post("/api/login", json=payload)

    assert response.status_code == 401
    assert response.json() == {"success": False, "detail": "Invalid credentials"}


def test_login_fails_closed_without_configured_admin(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("ADMIN_PASSWORD_HASH")
    reset_settings_cache()

    response = client.post(
        "/api/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}
    )

    assert response.status_code == 401
