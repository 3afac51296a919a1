"""Comment model.

Comments are append-only and belong to exactly one photo; they are
removed together with it.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from photomap.models.base import Base, CreatedAtMixin, IdMixin

if TYPE_CHECKING:
    from photomap.models.photo import Photo

MAX_COMMENT_LENGTH = 500


class Comment(Base, IdMixin, CreatedAtMixin):
    """A short text attached to a photo by any authenticated user.

    Attributes:
        id: Opaque primary key.
        photo_id: Foreign key to the commented photo.
        author_id: User id of the commenter.
        content: Trimmed text, 1 to 500 characters.
        photo: Related Photo model.
    """

    __tablename__ = "comments"
    __table_args__ = (Index("ix_comments_photo_id_created_at", "photo_id", "created_at"),)

    photo_id: Mapped[str] = mapped_column(
        ForeignKey("photos.id", ondelete="CASCADE"),
        nullable=False,
    )
    author_id: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(String(MAX_COMMENT_LENGTH), nullable=False)

    photo: Mapped["Photo"] = relationship("Photo", back_populates="comments")
