"""Comment endpoints.

Any authenticated user may read and add comments on any photo; only
the photo's existence is checked.
"""

from typing import List

from fastapi import APIRouter, Body, status

from photomap.api.deps import CurrentUser, Photos
from photomap.schemas.comment import CommentCreate, CommentRead

router = APIRouter(prefix="/photos/{photo_id}/comments", tags=["Comments"])


@router.get("", response_model=List[CommentRead], summary="List comments")
async def list_comments(photo_id: str, photos: Photos, user_id: CurrentUser) -> List[CommentRead]:
    """Comments of a photo, oldest first.

    Raises:
        404: Photo not found.
    """
    comments = await photos.list_comments(photo_id)
    return [CommentRead.model_validate(comment) for comment in comments]


@router.post(
    "",
    response_model=CommentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add a comment",
)
async def add_comment(
    photo_id: str,
    photos: Photos,
    user_id: CurrentUser,
    body: CommentCreate = Body(...),
) -> CommentRead:
    """Append a comment of 1 to 500 characters after trimming.

    Raises:
        400: Empty, too long or not a string.
        404: Photo not found.
    """
    comment = await photos.add_comment(user_id, photo_id, body.content)
    return CommentRead.model_validate(comment)
