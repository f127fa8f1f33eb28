"""
Health Check Endpoints - Liveness, readiness and version info.

    /health   version and environment
    /ready    ready once an LLM is usable; search and voice are reported
              separately since only some workflows need them
    /live     process is up
"""

from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter, Depends

from chatflow.core.config import get_settings, Settings
from chatflow.models.responses import HealthResponse, ReadinessResponse


router = APIRouter(tags=["Health"])


def _provider_checks(settings: Settings) -> Dict[str, bool]:
    return {
        "llm_configured": settings.llm_provider == "ollama" or bool(settings.llm_api_key),
        "search_configured": bool(settings.tavily_api_key),
        "voice_configured": bool(settings.deepgram_api_key),
    }


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Version and environment of the running service"
)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc)
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness Check",
    description="Report which providers are configured"
)
async def readiness_check(settings: Settings = Depends(get_settings)) -> ReadinessResponse:
    """
    Readiness probe for container orchestration.

    Only the LLM is required: every workflow starts with the query agent.
    """
    checks = _provider_checks(settings)
    return ReadinessResponse(ready=checks["llm_configured"], checks=checks)


@router.get("/live", summary="Liveness Check")
async def liveness_check() -> dict:
    return {"status": "alive"}
