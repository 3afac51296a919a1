"""Photo lifecycle service.

Entry point for every photo and comment operation exposed over HTTP.
Reads are open to any authenticated caller; delete and regenerate
are reserved to the owner. A non-owner gets the same ``NotFound`` as
for a missing photo, so the existence of other users' photos is never
confirmed.
"""

import enum
import logging
from typing import Any, List

from fastapi import BackgroundTasks
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from photomap.core.exceptions import InvalidCommentException, NotFoundException
from photomap.models import Comment, Photo
from photomap.models.comment import MAX_COMMENT_LENGTH
from photomap.services.enrichment import EnrichmentOrchestrator, reset_to_pending
from photomap.services.storage import BlobStorage, StorageError
from photomap.services.upload_validator import UploadValidator

logger = logging.getLogger(__name__)


class PhotoScope(str, enum.Enum):
    """Listing filter: the caller's own photos or everyone's."""

    MINE = "mine"
    ALL = "all"


class PhotoService:
    """Create, read, delete and regenerate photos; read and add comments.

    Attributes:
        session: Request-scoped database session.
        storage: Blob storage holding the image bytes.
        validator: Upload admission checks.
        orchestrator: Schedules description generation.
    """

    def __init__(
        self,
        session: AsyncSession,
        storage: BlobStorage,
        validator: UploadValidator,
        orchestrator: EnrichmentOrchestrator,
    ) -> None:
        self.session = session
        self.storage = storage
        self.validator = validator
        self.orchestrator = orchestrator

    async def create(
        self,
        owner_id: str,
        data: bytes,
        content_type: str,
        size: int,
        background_tasks: BackgroundTasks,
    ) -> Photo:
        """Admit an upload, store it and start enrichment.

        The photo row is committed before enrichment is scheduled so the
        background update always finds it.

        Raises:
            InvalidMediaTypeException, PayloadTooLargeException,
            MissingLocationException: From the upload validator.
        """
        upload = self.validator.validate(data, content_type, size)

        location_ref = self.storage.save(upload.data, extension=".jpg")
        photo = Photo(
            owner_id=owner_id,
            location_ref=location_ref,
            lat=upload.lat,
            lng=upload.lng,
        )
        reset_to_pending(photo)
        try:
            self.session.add(photo)
            await self.session.commit()
        except Exception:
            # No row points at the file, remove it before reporting
            try:
                self.storage.delete(location_ref)
            except StorageError as e:
                logger.warning(f"Failed to delete image file {location_ref}: {e}")
            raise
        await self.session.refresh(photo)

        logger.info(f"Photo {photo.id} created by {owner_id} at ({photo.lat}, {photo.lng})")
        self.orchestrator.dispatch(background_tasks, photo.id, photo.location_ref)
        return photo

    async def get(self, photo_id: str) -> Photo:
        """Return any photo by id.

        Raises:
            NotFoundException: If no such photo exists.
        """
        photo = await self.session.get(Photo, photo_id)
        if photo is None:
            raise NotFoundException("Photo not found")
        return photo

    async def list_photos(self, caller_id: str, scope: PhotoScope) -> List[Photo]:
        """List photos newest first, either the caller's or everyone's."""
        query = select(Photo).order_by(Photo.created_at.desc())
        if scope == PhotoScope.MINE:
            query = query.where(Photo.owner_id == caller_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def _get_owned(self, caller_id: str, photo_id: str) -> Photo:
        result = await self.session.execute(
            select(Photo).where(Photo.id == photo_id, Photo.owner_id == caller_id)
        )
        photo = result.scalar_one_or_none()
        if photo is None:
            raise NotFoundException("Photo not found")
        return photo

    async def delete(self, caller_id: str, photo_id: str) -> None:
        """Delete an owned photo, its comments and (best effort) its file.

        Raises:
            NotFoundException: If the photo is missing or not owned by the caller.
        """
        photo = await self._get_owned(caller_id, photo_id)
        location_ref = photo.location_ref

        try:
            self.storage.delete(location_ref)
        except StorageError as e:
            logger.warning(f"Failed to delete image file {location_ref}: {e}")

        await self.session.delete(photo)
        await self.session.commit()
        logger.info(f"Photo {photo_id} deleted by {caller_id}")

    async def regenerate(
        self,
        caller_id: str,
        photo_id: str,
        background_tasks: BackgroundTasks,
    ) -> Photo:
        """Reset an owned photo to PENDING and enrich it again.

        The stored file is reused as-is; the original upload is not
        validated a second time.

        Raises:
            NotFoundException: If the photo is missing or not owned by the caller.
        """
        photo = await self._get_owned(caller_id, photo_id)
        reset_to_pending(photo)
        await self.session.commit()

        logger.info(f"Regenerating description for photo {photo_id}")
        self.orchestrator.dispatch(background_tasks, photo.id, photo.location_ref)
        return photo

    async def _ensure_photo_exists(self, photo_id: str) -> None:
        result = await self.session.execute(select(Photo.id).where(Photo.id == photo_id))
        if result.scalar_one_or_none() is None:
            raise NotFoundException("Photo not found")

    async def list_comments(self, photo_id: str) -> List[Comment]:
        """Comments of any existing photo, oldest first.

        Raises:
            NotFoundException: If no such photo exists.
        """
        await self._ensure_photo_exists(photo_id)
        result = await self.session.execute(
            select(Comment)
            .where(Comment.photo_id == photo_id)
            .order_by(Comment.created_at.asc())
        )
        return list(result.scalars().all())

    async def add_comment(self, author_id: str, photo_id: str, content: Any) -> Comment:
        """Append a comment to any existing photo.

        Raises:
            NotFoundException: If no such photo exists.
            InvalidCommentException: If the trimmed content is empty or
                longer than 500 characters.
        """
        await self._ensure_photo_exists(photo_id)
        text = validate_comment(content)

        comment = Comment(photo_id=photo_id, author_id=author_id, content=text)
        self.session.add(comment)
        await self.session.commit()
        await self.session.refresh(comment)
        return comment


def validate_comment(content: Any) -> str:
    """Return the trimmed comment text or raise ``InvalidCommentException``."""
    if not isinstance(content, str):
        raise InvalidCommentException(
            "Comment content is required and must be a string. "
            "Please provide a valid comment."
        )

    text = content.strip()
    if not text:
        raise InvalidCommentException("Comment cannot be empty. Please enter some text.")
    if len(text) > MAX_COMMENT_LENGTH:
        raise InvalidCommentException(
            f"Comment is too long ({len(text)} characters). "
            f"Maximum length is {MAX_COMMENT_LENGTH} characters.",
            details={"length": len(text), "max_length": MAX_COMMENT_LENGTH},
        )
    return text
