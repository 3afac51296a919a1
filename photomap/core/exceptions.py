"""Custom exception classes for the application.

This module defines application-specific exceptions that map
to appropriate HTTP status codes and error responses. Every
exception carries a short machine-checkable ``kind`` next to the
human-readable message.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """Base exception for all application errors.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code to return.
        kind: Machine-checkable error kind.
        details: Additional error context.
    """

    status_code: int = 500
    kind: str = "internal_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            details: Additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class UnauthorizedException(AppException):
    """Raised when no valid principal accompanies the request."""

    status_code = 401
    kind = "unauthorized"

    def __init__(
        self,
        message: str = "Unauthorized",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)


class NotFoundException(AppException):
    """Raised when a resource does not exist or the caller may not touch it.

    Both cases deliberately share this exception so that a caller can
    never learn that a resource exists under someone else's ownership.
    """

    status_code = 404
    kind = "not_found"

    def __init__(
        self,
        message: str = "Resource not found",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)


class ValidationException(AppException):
    """Raised when request input is malformed."""

    status_code = 400
    kind = "validation_error"

    def __init__(
        self,
        message: str = "Validation error",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)


class InvalidMediaTypeException(ValidationException):
    """Raised when an upload is not a JPEG image."""

    kind = "invalid_media_type"

    def __init__(self, content_type: str) -> None:
        """Initialize with the offending content type.

        Args:
            content_type: Content type declared by the client.
        """
        super().__init__(
            message=(
                "Invalid file type. Only JPEG/JPG images are allowed. "
                f"Received: {content_type}"
            ),
            details={"content_type": content_type},
        )


class PayloadTooLargeException(ValidationException):
    """Raised when an upload exceeds the size ceiling."""

    kind = "payload_too_large"

    def __init__(self, size: int, max_size: int) -> None:
        """Initialize with the computed and allowed sizes.

        Args:
            size: Declared size of the upload in bytes.
            max_size: Configured ceiling in bytes.
        """
        size_mb = size / (1024 * 1024)
        max_mb = max_size / (1024 * 1024)
        super().__init__(
            message=(
                f"File size ({size_mb:.2f}MB) exceeds the {max_mb:g}MB limit. "
                "Please upload a smaller image."
            ),
            details={"size": size, "max_size": max_size},
        )


class MissingLocationException(ValidationException):
    """Raised when an upload carries no usable EXIF GPS coordinates."""

    kind = "missing_location"

    def __init__(self) -> None:
        super().__init__(
            message=(
                "Image does not contain GPS coordinates in EXIF metadata. "
                "Please upload a photo taken with a device that has location "
                "services enabled."
            ),
        )


class InvalidCommentException(ValidationException):
    """Raised when comment content is empty or too long."""

    kind = "invalid_comment"
