"""Photo endpoints: upload, list, detail, delete and regenerate.

Every endpoint requires a bearer token. Description generation never
blocks a request: upload and regenerate answer with ``PENDING`` and the
client polls the detail endpoint for the outcome.
"""

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, File, Query, UploadFile, status

from photomap.api.deps import CurrentUser, Photos
from photomap.core.exceptions import ValidationException
from photomap.schemas.photo import (
    MessageResponse,
    PhotoDetail,
    PhotoRead,
    PhotoSummary,
    RegenerateResponse,
)
from photomap.services.photos import PhotoScope

router = APIRouter(prefix="/photos", tags=["Photos"])


@router.post(
    "",
    response_model=PhotoRead,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a geotagged JPEG",
)
async def upload_photo(
    background_tasks: BackgroundTasks,
    photos: Photos,
    user_id: CurrentUser,
    file: Optional[UploadFile] = File(None, description="JPEG with EXIF GPS data"),
) -> PhotoRead:
    """Upload a photo and start generating its description.

    Raises:
        400: No file, not a JPEG, larger than 10MB, or no GPS in EXIF.
        401: Not authenticated.
    """
    if file is None:
        raise ValidationException("No file provided. Please select an image file to upload.")

    data = await file.read()
    size = file.size if file.size is not None else len(data)

    photo = await photos.create(
        owner_id=user_id,
        data=data,
        content_type=file.content_type or "",
        size=size,
        background_tasks=background_tasks,
    )
    return PhotoRead.model_validate(photo)


@router.get(
    "",
    response_model=List[PhotoSummary],
    summary="List photo markers",
)
async def list_photos(
    photos: Photos,
    user_id: CurrentUser,
    scope: PhotoScope = Query(PhotoScope.MINE, description="mine or all"),
    all: bool = Query(False, description="Shortcut for scope=all"),
) -> List[PhotoSummary]:
    """List the caller's photos, or every user's, newest first."""
    if all:
        scope = PhotoScope.ALL
    items = await photos.list_photos(user_id, scope)
    return [PhotoSummary.model_validate(photo) for photo in items]


@router.get(
    "/{photo_id}",
    response_model=PhotoDetail,
    summary="Photo detail",
)
async def get_photo(photo_id: str, photos: Photos, user_id: CurrentUser) -> PhotoDetail:
    """Return a photo of any owner, including its enrichment outcome.

    Raises:
        404: Photo not found.
    """
    photo = await photos.get(photo_id)
    return PhotoDetail.model_validate(photo)


@router.delete(
    "/{photo_id}",
    response_model=MessageResponse,
    summary="Delete own photo",
)
async def delete_photo(photo_id: str, photos: Photos, user_id: CurrentUser) -> MessageResponse:
    """Delete a photo owned by the caller together with its comments.

    Raises:
        404: Photo not found or not owned by the caller.
    """
    await photos.delete(user_id, photo_id)
    return MessageResponse(message="Photo deleted successfully")


@router.post(
    "/{photo_id}/regenerate-description",
    response_model=RegenerateResponse,
    summary="Regenerate description",
)
async def regenerate_description(
    photo_id: str,
    background_tasks: BackgroundTasks,
    photos: Photos,
    user_id: CurrentUser,
) -> RegenerateResponse:
    """Reset the description of an owned photo and generate it again.

    Raises:
        404: Photo not found or not owned by the caller.
    """
    await photos.regenerate(user_id, photo_id, background_tasks)
    return RegenerateResponse()
