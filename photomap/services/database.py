"""Async database session management.

This module provides the async SQLAlchemy engine and session
factory for non-blocking database operations. The module-level pair is
built from the environment settings; an application created with other
settings builds its own pair and keeps it on ``app.state``. Request
handlers receive sessions through :func:`get_db`.
"""

from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from photomap.core.config import Settings, settings
from photomap.models import Base


def _engine_options(url: str) -> Dict[str, Any]:
    """Pick pool options suited to the database backend.

    SQLite connections are cheap and tied to the event loop that opened
    them, so they are not pooled.
    """
    if url.startswith("sqlite"):
        return {"poolclass": NullPool}
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


def create_engine_for(config: Settings) -> AsyncEngine:
    """Create an async engine for the database named in ``config``."""
    url = config.SQLALCHEMY_DATABASE_URI
    return create_async_engine(url, echo=config.DEBUG, **_engine_options(url))


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    """Session factory whose objects stay usable after commit."""
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


# Create async engine with connection pooling
engine: AsyncEngine = create_engine_for(settings)

# Session factory for creating async sessions
AsyncSessionLocal = create_session_factory(engine)


async def init_models(bind: Optional[AsyncEngine] = None) -> None:
    """Create all tables that do not exist yet.

    Production deployments run Alembic migrations instead.

    Args:
        bind: Engine to create the tables on; defaults to the module engine.
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session.

    This is a FastAPI dependency that yields an async session
    and ensures proper cleanup after the request completes.

    Yields:
        AsyncSession: SQLAlchemy async session for database operations.
    """
    async with request.app.state.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
