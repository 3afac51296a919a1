"""Upload admission checks.

Checks run cheapest first and each one short-circuits the next:

1. content type (header only)
2. declared size
3. EXIF GPS position (requires decoding the byte stream)
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet

from photomap.core.exceptions import (
    InvalidMediaTypeException,
    MissingLocationException,
    PayloadTooLargeException,
)
from photomap.services.gps import read_exif_location

logger = logging.getLogger(__name__)

# image/jpg is non-standard but commonly sent by clients
ALLOWED_MIME_TYPES: FrozenSet[str] = frozenset({"image/jpeg", "image/jpg"})
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class ValidatedUpload:
    """An upload that passed every admission check.

    Attributes:
        data: The image bytes, unchanged.
        lat: Latitude in decimal degrees.
        lng: Longitude in decimal degrees.
    """

    data: bytes
    lat: float
    lng: float


class UploadValidator:
    """Decides whether an uploaded file may become a Photo."""

    def __init__(self, max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> None:
        self.max_upload_bytes = max_upload_bytes

    def validate(self, data: bytes, content_type: str, size: int) -> ValidatedUpload:
        """Run the admission checks in order.

        Args:
            data: Raw uploaded bytes.
            content_type: Content type declared by the client.
            size: Declared size in bytes.

        Returns:
            The validated upload with its normalized coordinates.

        Raises:
            InvalidMediaTypeException: Content type is not a JPEG variant.
            PayloadTooLargeException: Size exceeds the ceiling.
            MissingLocationException: No usable EXIF GPS coordinates.
        """
        content_type = content_type or ""
        if content_type.lower() not in ALLOWED_MIME_TYPES:
            raise InvalidMediaTypeException(content_type)

        if size > self.max_upload_bytes:
            raise PayloadTooLargeException(size, self.max_upload_bytes)

        lat, lng = read_exif_location(data)
        if lat is None or lng is None:
            logger.info("Rejected upload without EXIF GPS coordinates")
            raise MissingLocationException()

        return ValidatedUpload(data=data, lat=lat, lng=lng)
