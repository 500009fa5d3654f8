"""Prometheus instrumentation helpers for the FastAPI application."""

from __future__ import annotations

import os
from typing import Callable, cast

from fastapi import FastAPI
from fastapi.responses import Response
from prometheus_client import CollectorRegistry, Counter, multiprocess
from prometheus_client.openmetrics.exposition import generate_latest as generate_openmetrics
from prometheus_fastapi_instrumentator import Instrumentator, metrics

ERROR_RESPONSES = Counter(
    "payment_api_error_responses",
    "Error envelopes rendered by the error translator.",
    labelnames=("code", "status"),
)


def record_error_response(code: str, status_code: int) -> None:
    ERROR_RESPONSES.labels(code, str(status_code)).inc()


def setup_metrics(app: FastAPI) -> None:
    """Attach Prometheus instrumentation and expose the /metrics endpoint."""

    instrumentator = Instrumentator(
        should_group_status_codes=False,
        should_ignore_untemplated=True,
        should_respect_env_var=False,
        excluded_handlers=[r"/metrics"],
    )
    instrumentator.add(metrics.default())
    instrumentator.instrument(app)
    _register_metrics_endpoint(app, instrumentator.registry)


def _register_metrics_endpoint(app: FastAPI, registry: CollectorRegistry) -> None:
    @app.get("/metrics", include_in_schema=False, tags=["observability"])
    async def metrics_endpoint() -> Response:
        active_registry = registry
        if "PROMETHEUS_MULTIPROC_DIR" in os.environ:
            active_registry = CollectorRegistry()
            collector = cast(
                Callable[[CollectorRegistry], None],
                multiprocess.MultiProcessCollector,
            )
            collector(active_registry)

        generate = cast(
            Callable[[CollectorRegistry], bytes],
            generate_openmetrics,
        )
        payload = generate(active_registry)
        media_type = "application/openmetrics-text; version=1.0.0; charset=utf-8"
        return Response(content=payload, media_type=media_type)


__all__ = ["ERROR_RESPONSES", "record_error_response", "setup_metrics"]
