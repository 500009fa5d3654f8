"""FastAPI application factory and entrypoint."""

from __future__ import annotations

from fastapi import FastAPI

from payment_api.api.routes import root_router
from payment_api.core.config import Settings, settings
from payment_api.core.errors import register_exception_handlers
from payment_api.core.logging import configure_logging
from payment_api.core.metrics import setup_metrics
from payment_api.core.middleware import AccessLogMiddleware, RequestIDMiddleware
from payment_api.core.version import APP_VERSION

configure_logging(settings.log_level)


def create_app(app_settings: Settings = settings) -> FastAPI:
    """Build and configure the FastAPI application."""

    # Debug tracebacks bypass the error translator.
    debug = app_settings.debug and app_settings.environment != "production"

    application = FastAPI(
        title=app_settings.project_name,
        debug=debug,
        version=APP_VERSION,
        docs_url="/docs" if debug else None,
        redoc_url="/redoc" if debug else None,
    )

    register_exception_handlers(application)

    if app_settings.metrics_enabled:
        setup_metrics(application)

    application.add_middleware(AccessLogMiddleware)
    application.add_middleware(RequestIDMiddleware)

    application.include_router(root_router)

    return application


app = create_app()

__all__ = ["app", "create_app"]
