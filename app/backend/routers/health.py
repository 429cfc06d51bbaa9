"""
Router for health check endpoints.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

# Handle both package imports and standalone imports
try:
    from ..config import Settings, get_settings
    from ..models import HealthResponse, Provider
except ImportError:
    from config import Settings, get_settings
    from models import HealthResponse, Provider

router = APIRouter(prefix="/api/health", tags=["health"])

SERVICE_VERSION = "1.0.0"


def provider_status(settings: Settings) -> dict[str, str]:
    """Map each provider to 'configured' or 'not_configured'."""
    configured = settings.configured_providers
    return {
        provider.value: "configured" if provider.value in configured else "not_configured"
        for provider in Provider
    }


def build_health(settings: Settings) -> HealthResponse:
    services = {"pdf_processor": "available", **provider_status(settings)}
    return HealthResponse(
        status="healthy",
        version=SERVICE_VERSION,
        timestamp=datetime.now(timezone.utc),
        services=services,
    )


@router.get("", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """Basic health check with provider configuration."""
    return build_health(settings)


@router.get("/detailed")
async def detailed_health_check(settings: Settings = Depends(get_settings)) -> JSONResponse:
    """
    Health check with per-component results.

    Returns 503 when no LLM provider is configured, since extraction
    cannot run.
    """
    llm_services = {
        **provider_status(settings),
        "status": "pass" if settings.configured_providers else "fail",
    }
    checks = {
        "server": {"status": "pass"},
        "llm_services": llm_services,
    }
    healthy = all(check["status"] != "fail" for check in checks.values())

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": checks,
        },
    )
