"""Dependency injection utilities for API endpoints.

This module provides common dependencies used across API routes,
such as database sessions, the authenticated caller and the photo
service. Long-lived collaborators (storage, validator, enrichment
orchestrator) are built once in the application lifespan and read
from ``app.state``.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from photomap.core.security import get_current_user
from photomap.services.database import get_db
from photomap.services.photos import PhotoService

# Type alias for database session dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]

# Type alias for the authenticated user id
CurrentUser = Annotated[str, Depends(get_current_user)]


def get_photo_service(request: Request, db: DBSession) -> PhotoService:
    """Build a request-scoped photo service.

    Args:
        request: Incoming request, used to reach ``app.state``.
        db: Request database session.

    Returns:
        PhotoService bound to the session.
    """
    state = request.app.state
    return PhotoService(
        session=db,
        storage=state.storage,
        validator=state.upload_validator,
        orchestrator=state.enrichment,
    )


# Type alias for photo service dependency
Photos = Annotated[PhotoService, Depends(get_photo_service)]
