"""Root API router with health endpoints and module mounting."""

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from userspan.api.dependencies import AppSettings
from userspan.modules import discover_modules


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str


# Create root API router
api_router = APIRouter()

health_router = APIRouter(tags=["health"])


@health_router.get(
    "/health/live",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Kubernetes liveness probe. Returns 200 if the process is running.",
)
async def liveness() -> HealthResponse:
    """Liveness probe endpoint."""
    return HealthResponse(status="alive")


@health_router.get(
    "/info",
    summary="Application info",
    description="Returns application and tracing metadata.",
)
async def info(settings: AppSettings) -> dict[str, Any]:
    """Application info endpoint."""
    return {
        "app": settings.app_name,
        "environment": settings.environment,
        "service_version": settings.service_version,
        "trace_exporter": settings.trace_exporter,
    }


# Mount discovered module routers at the root
api_router.include_router(health_router)
for module_router in discover_modules():
    api_router.include_router(module_router)
