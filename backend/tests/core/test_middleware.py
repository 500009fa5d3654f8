from __future__ import annotations

import json
import logging
from typing import cast

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from starlette.types import ASGIApp

from payment_api.core.errors import register_exception_handlers
from payment_api.core.logging import JsonLogFormatter, get_request_id
from payment_api.core.middleware import AccessLogMiddleware, RequestIDMiddleware


def _build_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    app.add_middleware(AccessLogMiddleware, logger_name="tests.access")
    app.add_middleware(RequestIDMiddleware)

    @app.get("/ping")
    async def ping() -> dict[str, str | None]:
        return {"request_id": get_request_id()}

    @app.get("/crash")
    async def crash() -> None:
        raise RuntimeError("settlement worker died")

    return app


def _client(app: FastAPI) -> AsyncClient:
    transport = ASGITransport(
        app=cast(ASGIApp, app),  # type: ignore[arg-type]
        raise_app_exceptions=False,
    )
    return AsyncClient(transport=transport, base_url="http://testserver")


@pytest.mark.asyncio
async def test_request_id_is_generated_and_bound() -> None:
    async with _client(_build_app()) as client:
        response = await client.get("/ping")

    request_id = response.headers.get("X-Request-ID")
    assert request_id
    assert response.json()["request_id"] == request_id


@pytest.mark.asyncio
async def test_request_id_from_client_is_preserved() -> None:
    async with _client(_build_app()) as client:
        response = await client.get("/ping", headers={"X-Request-ID": "pay-req-77"})

    assert response.headers["X-Request-ID"] == "pay-req-77"
    assert response.json()["request_id"] == "pay-req-77"


@pytest.mark.asyncio
async def test_access_log_records_request_metadata(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="tests.access")

    async with _client(_build_app()) as client:
        await client.get("/ping")

    record = next(record for record in caplog.records if record.name == "tests.access")
    assert getattr(record, "http_method", None) == "GET"
    assert getattr(record, "http_path", None) == "/ping"
    assert getattr(record, "status_code", None) == 200
    assert isinstance(getattr(record, "duration_ms", None), float)


@pytest.mark.asyncio
async def test_access_log_records_error_status(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="tests.access")

    async with _client(_build_app()) as client:
        response = await client.get("/missing")

    assert response.status_code == 404
    record = next(record for record in caplog.records if record.name == "tests.access")
    assert getattr(record, "status_code", None) == 404


class _FormattedLines(logging.Handler):
    """Format at emit time, while the request context is still bound."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.setFormatter(JsonLogFormatter())
        self.lines: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.lines.append(self.format(record))


@pytest.mark.asyncio
async def test_unhandled_error_keeps_request_correlation() -> None:
    capture = _FormattedLines()
    errors_logger = logging.getLogger("payment_api.errors")
    errors_logger.addHandler(capture)
    try:
        async with _client(_build_app()) as client:
            response = await client.get("/crash", headers={"X-Request-ID": "pay-req-500"})
    finally:
        errors_logger.removeHandler(capture)

    assert response.status_code == 500
    assert response.headers.get("X-Request-ID") == "pay-req-500"
    assert response.json()["error"]["code"] == "INTERNAL_SERVER_ERROR"

    assert len(capture.lines) == 1
    payload = json.loads(capture.lines[0])
    assert payload["request_id"] == "pay-req-500"
    assert payload["error"]["error_code"] == "INTERNAL_SERVER_ERROR"
