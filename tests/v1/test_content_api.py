# tests/v1/test_content_api.py
"""Tests for the editor preview sanitization endpoint."""

from fastapi import status
from fastapi.testclient import TestClient


def test_sanitize_preview(client: TestClient) -> None:
    response = client.post(
        "/api/v1/content/sanitize",
        json={"html": '<p style="text-align:center" onclick="x()">Hi<script>1</script></p>'},
    )
    assert response.status_code == status.HTTP_200_OK
    html = response.json()["html"]
    assert html.startswith('<p style="text-align: center;">Hi')
    assert "onclick" not in html
    assert "<script" not in html
