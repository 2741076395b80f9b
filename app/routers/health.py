# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# /health       process is up, plus the catalog it serves
# /health/ready store reachable and both provider clients configured
# /health/live  liveness probe, no dependency checks
#
# Readiness never raises: a failing dependency shows up as "degraded" with
# the failing check spelled out.
# =============================================================================

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from ai.model_registry import AVAILABLE_MODELS, Provider
from app.config import settings
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso

router = APIRouter()

API_VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str
    version: str
    models: int = Field(..., description="Catalog entries this instance can serve")


class DependencyChecks(BaseModel):
    """Result of each readiness probe ("healthy" or "unhealthy: <reason>")."""
    database: str = "unknown"
    cerebras: str = "unknown"
    sambanova: str = "unknown"

    @property
    def all_healthy(self) -> bool:
        return all(value == "healthy" for value in self.model_dump().values())


class ReadinessResponse(BaseModel):
    status: str
    checks: DependencyChecks
    timestamp: str


class LivenessResponse(BaseModel):
    status: str
    timestamp: str


# =============================================================================
# Probes
# =============================================================================

def _check_database() -> str:
    try:
        SupabaseClient.get_client().table("projects").select("id").limit(1).execute()
    except Exception as e:
        return f"unhealthy: {str(e)[:50]}"
    return "healthy"


def _check_provider(request: Request, provider: Provider) -> str:
    registry = getattr(request.app.state, "providers", None)
    if registry is None or provider not in registry.providers:
        return "unhealthy: client not configured"
    return "healthy"


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(
        status="healthy",
        timestamp=utc_now_iso(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
        models=len(AVAILABLE_MODELS),
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request):
    """
    Readiness for traffic.

    The provider clients are built once at startup, so a missing key shows
    up here as an unconfigured client rather than as a failed request.
    """
    checks = DependencyChecks(
        database=_check_database(),
        cerebras=_check_provider(request, Provider.CEREBRAS),
        sambanova=_check_provider(request, Provider.SAMBANOVA),
    )

    return ReadinessResponse(
        status="ready" if checks.all_healthy else "degraded",
        checks=checks,
        timestamp=utc_now_iso(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    return LivenessResponse(status="alive", timestamp=utc_now_iso())
