"""Ensure security middleware applies hardened headers."""

from __future__ import annotations

import io


def test_security_headers_present(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    headers = response.headers

    assert headers["X-Content-Type-Options"] == "nosniff"
    assert headers["X-Frame-Options"] == "DENY"
    assert headers["Referrer-Policy"] == "no-referrer"


def test_downloaded_documents_are_sandboxed(client):
    client.post(
        "/api/docs/upload",
        data={"title": "A", "category": "c1", "description": "d"},
        files={"file": ("page.html", io.BytesIO(b"<script>1</script>"), "text/html")},
    )

    response = client.get("/api/docs/page.html")

    assert response.status_code == 200
    assert "sandbox" in response.headers["Content-Security-Policy"]
