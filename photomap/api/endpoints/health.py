"""Health check endpoint for service monitoring.

Liveness plus a readiness check covering the database, the upload
directory and the active vision backend.
"""

import os
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request
from sqlalchemy import text

from photomap import __version__
from photomap.api.deps import DBSession
from photomap.core.config import settings

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=Dict[str, Any],
    summary="Health Check",
    description="Check if the API service is running.",
)
async def health_check() -> Dict[str, Any]:
    """Perform a basic health check.

    Returns:
        Dictionary with service status and metadata.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.APP_ENV,
        "version": __version__,
    }


@router.get(
    "/health/ready",
    response_model=Dict[str, Any],
    summary="Readiness Check",
    description="Check if the service is ready to accept requests (including DB).",
)
async def readiness_check(request: Request, db: DBSession) -> Dict[str, Any]:
    """Perform a readiness check including database connectivity.

    Args:
        request: Incoming request, used to reach the app's storage and vision backend.
        db: Async database session.

    Returns:
        Dictionary with detailed service and dependency status.
    """
    db_status = "healthy"
    db_message = "Connected"

    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
    except Exception as e:
        db_status = "unhealthy"
        db_message = str(e)

    storage_path = request.app.state.storage.base_path
    if storage_path.is_dir() and os.access(storage_path, os.W_OK):
        storage_status = "healthy"
        storage_message = "Writable"
    else:
        storage_status = "unhealthy"
        storage_message = f"Upload directory missing or read-only: {storage_path}"

    ready = db_status == "healthy" and storage_status == "healthy"
    overall_status = "ready" if ready else "not_ready"

    return {
        "status": overall_status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "database": {
                "status": db_status,
                "message": db_message,
            },
            "storage": {
                "status": storage_status,
                "message": storage_message,
            },
            "vision_provider": request.app.state.enrichment.provider.name,
        },
    }
