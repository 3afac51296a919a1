"""FastAPI application entry point.

This module initializes the FastAPI application with CORS,
middleware, route registration and the long-lived collaborators
(blob storage, upload validator, vision provider, enrichment
orchestrator) shared by every request.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from photomap import __version__
from photomap.api.endpoints import comments, health, photos
from photomap.core.config import Settings, get_settings
from photomap.core.logging import setup_logging
from photomap.middleware.error_handler import ErrorHandlerMiddleware, setup_exception_handlers
from photomap.services.database import (
    AsyncSessionLocal,
    create_engine_for,
    create_session_factory,
    engine,
    init_models,
)
from photomap.services.enrichment import EnrichmentOrchestrator
from photomap.services.storage import URL_PREFIX, BlobStorage
from photomap.services.upload_validator import UploadValidator
from photomap.services.vision import get_vision_provider

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle events.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = app.state.settings

    # Startup
    logger.info("Starting Photomap API...")
    logger.info(f"Environment: {settings.APP_ENV}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    if settings.AUTO_CREATE_TABLES:
        await init_models(app.state.engine)

    yield

    # Shutdown
    # Enrichment still running at this point is lost; affected photos
    # stay PENDING until their owner regenerates.
    logger.info("Shutting down Photomap API...")
    await app.state.engine.dispose()


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use; defaults to the cached environment settings.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    # The environment database reuses the module engine shared with
    # background work; any other URL gets an engine of its own
    if settings.SQLALCHEMY_DATABASE_URI == get_settings().SQLALCHEMY_DATABASE_URI:
        db_engine, session_factory = engine, AsyncSessionLocal
    else:
        db_engine = create_engine_for(settings)
        session_factory = create_session_factory(db_engine)

    app = FastAPI(
        title="Photomap API",
        description=(
            "Upload geotagged photos, browse them on a map and read "
            "machine-generated descriptions of each picture."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    storage = BlobStorage(settings.UPLOAD_DIR)
    app.state.settings = settings
    app.state.engine = db_engine
    app.state.session_factory = session_factory
    app.state.storage = storage
    app.state.upload_validator = UploadValidator(settings.MAX_UPLOAD_BYTES)
    app.state.enrichment = EnrichmentOrchestrator(
        provider=get_vision_provider(settings, storage),
        session_factory=session_factory,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add error handling middleware
    app.add_middleware(ErrorHandlerMiddleware)

    # Setup exception handlers
    setup_exception_handlers(app)

    # Register routers
    app.include_router(health.router)
    app.include_router(photos.router, prefix=settings.API_PREFIX)
    app.include_router(comments.router, prefix=settings.API_PREFIX)

    # Stored images are served read-only under their reference path
    app.mount(
        URL_PREFIX.rstrip("/"),
        StaticFiles(directory=str(storage.base_path)),
        name="uploads",
    )

    return app


# Create the application instance
app = create_application()
