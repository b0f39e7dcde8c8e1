"""
Health Check Endpoints - Application health and status monitoring.
"""

from fastapi import APIRouter, Depends
from datetime import datetime

from finresearch.agents.tools import ToolRegistry
from finresearch.core.config import get_settings, Settings
from finresearch.core.dependencies import get_tool_registry
from finresearch.models.responses import HealthResponse


router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check if the API is running and healthy"
)
async def health_check(
    settings: Settings = Depends(get_settings),
    tools: ToolRegistry = Depends(get_tool_registry)
) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns:
        HealthResponse with status, version and declared tools
    """
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
        tools=tools.names,
        timestamp=datetime.utcnow()
    )


@router.get(
    "/ready",
    summary="Readiness Check",
    description="Check if the API is ready to accept requests"
)
async def readiness_check(
    settings: Settings = Depends(get_settings)
) -> dict:
    """
    Readiness check for container orchestration.

    Verifies that credentials for the external collaborators are set.
    """
    checks = {
        "api": True,
        "config_loaded": settings is not None,
        "llm_configured": bool(settings.openai_api_key),
        "data_provider_configured": bool(settings.financial_datasets_api_key),
    }

    all_ready = all(checks.values())

    return {
        "ready": all_ready,
        "checks": checks,
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get(
    "/live",
    summary="Liveness Check",
    description="Simple liveness check"
)
async def liveness_check() -> dict:
    """Returns OK if the server is running."""
    return {"status": "alive"}
