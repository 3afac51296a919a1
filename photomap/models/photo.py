"""Photo model for storing geotagged uploads.

This module defines the Photo model which stores the reference to an
uploaded image, its EXIF coordinates and the state of the machine
generated description.
"""

import enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Enum, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from photomap.models.base import Base, CreatedAtMixin, IdMixin

if TYPE_CHECKING:
    from photomap.models.comment import Comment


class AiStatus(str, enum.Enum):
    """Enrichment state of a photo.

    PENDING is entered on upload and on every regenerate request.
    DONE and ERROR are terminal until the owner regenerates.
    """

    PENDING = "PENDING"
    DONE = "DONE"
    ERROR = "ERROR"


class Photo(Base, IdMixin, CreatedAtMixin):
    """Represents an uploaded photo and its enrichment outcome.

    Attributes:
        id: Opaque primary key.
        owner_id: User id of the uploader; only the owner may delete or
            regenerate.
        location_ref: Blob storage reference of the image bytes.
        lat: Latitude in decimal degrees from EXIF.
        lng: Longitude in decimal degrees from EXIF.
        ai_status: Enrichment state.
        ai_description: Generated description, set only when DONE.
        ai_error: Failure explanation, set only when ERROR.
        comments: Related comments, removed with the photo.
    """

    __tablename__ = "photos"
    __table_args__ = (Index("ix_photos_lat_lng", "lat", "lng"),)

    owner_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    location_ref: Mapped[str] = mapped_column(String(512), nullable=False)
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lng: Mapped[float] = mapped_column(Float, nullable=False)
    ai_status: Mapped[AiStatus] = mapped_column(
        Enum(AiStatus, name="ai_status_enum"),
        nullable=False,
        default=AiStatus.PENDING,
    )
    ai_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ai_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationship
    comments: Mapped[List["Comment"]] = relationship(
        "Comment",
        back_populates="photo",
        cascade="all, delete-orphan",
        order_by="Comment.created_at",
    )
