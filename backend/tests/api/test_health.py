from __future__ import annotations

from datetime import datetime

import pytest
from httpx import AsyncClient

from payment_api.core.version import APP_VERSION


@pytest.mark.asyncio
async def test_health_returns_expected_payload(app_client: AsyncClient) -> None:
    response = await app_client.get("/health")

    assert response.status_code == 200

    payload = response.json()
    assert payload["status"] == "healthy"
    assert payload["version"] == APP_VERSION

    # Ensure timestamp is ISO-8601 parsable
    datetime.fromisoformat(payload["timestamp"])


@pytest.mark.asyncio
async def test_request_id_header_generated(app_client: AsyncClient) -> None:
    response = await app_client.get("/health")

    request_id = response.headers.get("X-Request-ID")
    assert request_id
    assert len(request_id) >= 8


@pytest.mark.asyncio
async def test_access_log_contains_request_metadata(
    app_client: AsyncClient, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level("INFO", logger="payment_api.access")

    await app_client.get("/health")

    log_record = next(
        record for record in caplog.records if record.name == "payment_api.access"
    )
    assert getattr(log_record, "http_path", None) == "/health"
    assert getattr(log_record, "status_code", None) == 200


@pytest.mark.asyncio
async def test_unknown_route_returns_structured_error(app_client: AsyncClient) -> None:
    response = await app_client.get("/non-existent")

    assert response.status_code == 404
    payload = response.json()
    assert payload["success"] is False
    assert payload["error"]["code"] == "NOT_FOUND"
    assert payload["error"]["path"] == "/non-existent"
