"""Database models.

Importing this package registers every table on ``Base.metadata``.
"""

from photomap.models.base import Base
from photomap.models.comment import Comment
from photomap.models.photo import AiStatus, Photo

__all__ = ["AiStatus", "Base", "Comment", "Photo"]
