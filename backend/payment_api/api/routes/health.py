"""Health check endpoint."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from payment_api.core.version import APP_VERSION

router = APIRouter()


class HealthResponse(BaseModel):
    """Schema returned by the /health endpoint."""

    status: Literal["healthy", "unhealthy"]
    timestamp: datetime
    version: str = Field(default=APP_VERSION)


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    tags=["health"],
)
async def health() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(tz=timezone.utc),
        version=APP_VERSION,
    )
