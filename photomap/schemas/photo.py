"""Pydantic models for photo responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from photomap.models.photo import AiStatus


class PhotoSummary(BaseModel):
    """Map-marker entry returned by the list endpoint."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    lat: float
    lng: float
    created_at: datetime


class PhotoRead(PhotoSummary):
    """Photo returned right after upload."""

    url: str = Field(validation_alias="location_ref")
    ai_status: AiStatus
    ai_description: Optional[str] = None


class PhotoDetail(PhotoRead):
    """Full photo including ownership and enrichment outcome."""

    owner_id: str
    ai_error: Optional[str] = None


class RegenerateResponse(BaseModel):
    message: str = "AI description regeneration started"
    ai_status: AiStatus = AiStatus.PENDING


class MessageResponse(BaseModel):
    message: str
