"""Pydantic models for comments."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class CommentCreate(BaseModel):
    """Request body of the add-comment endpoint.

    ``content`` is typed loosely so that length and type problems are
    reported with the comment-specific error kind.
    """

    content: Any = None


class CommentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    photo_id: str
    author_id: str
    content: str
    created_at: datetime
