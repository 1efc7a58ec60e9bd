"""
Health check endpoints.
"""

from typing import Any, Dict

from fastapi import APIRouter

from config.database import check_table, get_supabase_client_optional
from config.settings import get_settings


router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": "discovery-search-api",
    }


@router.get("/health/detailed")
def detailed_health_check() -> Dict[str, Any]:
    """
    Detailed health check with dependency status.

    Checks:
    - Supabase connection (one-row read of the products table)
    - Whether LLM entity extraction is configured
    """
    settings = get_settings()
    supabase = check_table(settings.products_table)

    return {
        "status": "healthy" if supabase["status"] == "connected" else "degraded",
        "service": "discovery-search-api",
        "environment": settings.environment,
        "checks": {
            "config": "ok",
            "supabase": supabase,
            "entity_extractor": settings.extractor_mode,
        },
    }


@router.get("/ready")
async def readiness_check() -> Dict[str, str]:
    """Kubernetes-style readiness probe."""
    client = get_supabase_client_optional()
    if client is None:
        return {"status": "not_ready", "reason": "database_not_configured"}

    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> Dict[str, str]:
    """Kubernetes-style liveness probe."""
    return {"status": "alive"}
