"""
Health check and monitoring endpoints.
"""
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends

from storedash.core.config import settings
from storedash.core.database import is_db_available
from storedash.core.exceptions import BackendError
from storedash.repositories.base import DocumentStore
from storedash.routers.deps import get_document_store

router = APIRouter(tags=["health"])


@router.get("/")
async def root() -> dict:
    """API root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "mode": "database" if is_db_available() else "demo",
    }


@router.get("/health")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version,
    }


@router.get("/health/ready")
async def readiness_check(
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> dict:
    """
    Readiness check - whether the service can handle requests.
    Verifies the document store answers a count query.
    """
    try:
        await store.count_where(settings.stores_collection, [])
        backend_status = "connected"
    except BackendError as e:
        backend_status = f"error: {str(e)}"

    is_ready = backend_status == "connected"

    return {
        "status": "ready" if is_ready else "not_ready",
        "checks": {
            "document_store": backend_status,
            "database": "connected" if is_db_available() else "demo",
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/live")
async def liveness_check() -> dict:
    """
    Liveness check - whether the service is alive.
    Simple check that doesn't verify dependencies.
    """
    return {
        "status": "alive",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
