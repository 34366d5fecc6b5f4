"""
Health check endpoints.
"""

from typing import Any, Dict

from fastapi import APIRouter

from config.settings import get_settings
from search.errors import BackendUnavailableError
from search.weaviate_client import get_weaviate_client


router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Basic liveness check."""
    return {
        "status": "healthy",
        "service": "storefront-search",
    }


@router.get("/health/detailed")
def detailed_health_check() -> Dict[str, Any]:
    """
    Health with Weaviate reachability.

    Returns:
        Status "healthy" when Weaviate answers /v1/meta, otherwise "degraded".
    """
    settings = get_settings()

    weaviate_status = "connected"
    weaviate_error = None
    weaviate_version = None
    try:
        weaviate_version = get_weaviate_client().meta().get("version")
    except BackendUnavailableError as e:
        weaviate_status = "error"
        weaviate_error = str(e)

    return {
        "status": "healthy" if weaviate_status == "connected" else "degraded",
        "environment": settings.environment,
        "dependencies": {
            "weaviate": {
                "status": weaviate_status,
                "url": settings.weaviate_url,
                "version": weaviate_version,
                "error": weaviate_error,
            },
        },
    }
