# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from app.dependencies import CoordinatorDep

router = APIRouter()

API_VERSION = "1.0.0"


class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str
    asset_store: str
    entity_store: str


class LivenessResponse(BaseModel):
    """Liveness check response."""
    status: str
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health", response_model=HealthResponse)
async def health_check(coordinator: CoordinatorDep):
    """
    Health check endpoint.

    Reports which store implementations the media stack is wired to.
    """
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
        asset_store=type(coordinator.asset_store).__name__,
        entity_store=type(coordinator.entity_store).__name__,
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """
    Liveness check endpoint.

    Returns whether the service process is alive.
    """
    return LivenessResponse(status="alive", timestamp=_now())
