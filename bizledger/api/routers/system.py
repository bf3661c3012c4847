"""System API routes for the service banner and health check."""

from typing import Any

from fastapi import APIRouter, Depends
from typing_extensions import Annotated

from bizledger.api.dependencies import CommonDependencies, get_common_deps
from bizledger.api.errors import success_response
from bizledger.version import VERSION

router = APIRouter(tags=["system"])
banner_router = APIRouter(tags=["system"])

ENDPOINTS = {
    "health": "/api/health",
    "operations": "/api/operations",
    "categories": "/api/categories",
    "analytics": "/api/analytics",
    "ai": "/api/ai",
}


@banner_router.get("/")
async def banner(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    """Service name, version and endpoint map."""
    return success_response(
        data={"name": deps.settings.app_name, "version": VERSION, "endpoints": ENDPOINTS},
        message=f"{deps.settings.app_name} API is running",
    )


@router.get("/health")
async def health(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    """Health check endpoint."""
    return success_response(
        data={
            "status": "healthy",
            "version": VERSION,
            "environment": deps.settings.environment,
            "provider_configured": deps.provider.configured,
            "operations_count": await deps.db.count_operations(),
        }
    )
