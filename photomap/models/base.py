"""SQLAlchemy declarative base and common mixins.

This module provides the base class for all database models
along with reusable mixins for common patterns.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate an opaque primary key."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models.

    Provides a common foundation for model definitions with
    a readable repr.
    """

    def __repr__(self) -> str:
        """Generate string representation of the model instance.

        Returns:
            String with class name and primary key values.
        """
        pk_cols = [col.name for col in self.__table__.primary_key.columns]
        pk_values = ", ".join(f"{col}={getattr(self, col, None)}" for col in pk_cols)
        return f"<{self.__class__.__name__}({pk_values})>"


class IdMixin:
    """Mixin that adds an opaque string primary key.

    Attributes:
        id: UUID4 string assigned on insert.
    """

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_id,
    )


class CreatedAtMixin:
    """Mixin that adds an immutable creation timestamp.

    The value is set client-side with microsecond precision so that
    rows created within the same second still sort deterministically.

    Attributes:
        created_at: Timestamp when record was created.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
