"""Router aggregations for public API endpoints."""

from fastapi import APIRouter

from payment_api.api.routes import health

root_router = APIRouter()
root_router.include_router(health.router, tags=["health"])

__all__ = ["root_router"]
