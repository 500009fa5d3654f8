from __future__ import annotations

import logging
import os
from typing import AsyncIterator, Final, cast

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from starlette.types import ASGIApp

_TEST_ENV_VARS: Final[dict[str, str]] = {
    "APP_ENV": "test",
    "LOG_LEVEL": "INFO",
    "METRICS_ENABLED": "true",
}

for key, value in _TEST_ENV_VARS.items():
    os.environ.setdefault(key, value)

from payment_api.core.errors import ErrorTranslator  # noqa: E402

TRANSLATOR_LOGGER_NAME: Final[str] = "tests.errors"


@pytest.fixture()
def translator_logger() -> logging.Logger:
    return logging.getLogger(TRANSLATOR_LOGGER_NAME)


@pytest.fixture()
def translator(translator_logger: logging.Logger) -> ErrorTranslator:
    return ErrorTranslator(translator_logger)


@pytest_asyncio.fixture
async def app_client() -> AsyncIterator[AsyncClient]:
    from payment_api.main import app

    transport = ASGITransport(
        app=cast(ASGIApp, app),  # type: ignore[arg-type]
        raise_app_exceptions=False,
    )
    client = AsyncClient(transport=transport, base_url="http://testserver")
    try:
        yield client
    finally:
        await client.aclose()
