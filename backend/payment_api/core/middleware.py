"""Custom FastAPI middlewares for request context and access logging."""

from __future__ import annotations

import logging
import time
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from payment_api.core.logging import REQUEST_ID_HEADER, bind_request_id, reset_request_id


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request_id to each request so log records can be correlated.

    The id is also kept on ``request.state`` for the server-error handler,
    which runs outside this middleware after the context has been reset.
    """

    header_name = REQUEST_ID_HEADER

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(self.header_name) or uuid4().hex

        request.state.request_id = request_id
        token = bind_request_id(request_id)

        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)

        response.headers[self.header_name] = request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Emit one structured access record per request."""

    def __init__(self, app: ASGIApp, logger_name: str = "payment_api.access") -> None:
        super().__init__(app)
        self.logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            self._log(request, 500, (time.perf_counter() - start) * 1000)
            raise

        self._log(request, response.status_code, (time.perf_counter() - start) * 1000)
        return response

    def _log(self, request: Request, status_code: int, duration_ms: float) -> None:
        self.logger.info(
            "access",
            extra={
                "event": "access",
                "http_method": request.method,
                "http_path": request.url.path,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 2),
                "client_ip": request.client.host if request.client else None,
            },
        )


__all__ = ["AccessLogMiddleware", "RequestIDMiddleware"]
