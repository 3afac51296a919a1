"""
Local blob storage for uploaded images.

Files are written under ``UPLOAD_DIR`` with a generated UUID name and
addressed by references of the form ``/uploads/<uuid>.jpg``. The same
directory is mounted at ``/uploads`` so references double as URLs.
"""

import logging
import uuid
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads/"


class StorageError(Exception):
    """Base exception for storage-related errors."""
    pass


class FileNotFoundStorageError(StorageError):
    """Raised when a referenced file does not exist."""
    pass


class BlobStorage:
    """
    Opaque put/get/delete over a local directory.

    Attributes:
        base_path: Directory holding the files.
    """

    def __init__(self, base_path: Union[str, Path]) -> None:
        self.base_path = Path(base_path)
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create storage directory {self.base_path}: {e}")
        logger.info(f"Storage initialized at: {self.base_path}")

    def _path_for(self, ref: str) -> Path:
        if not ref.startswith(URL_PREFIX):
            raise StorageError(f"Not a storage reference: {ref}")
        name = ref[len(URL_PREFIX):]
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise StorageError(f"Not a storage reference: {ref}")
        return self.base_path / name

    def save(self, data: bytes, extension: str = ".jpg") -> str:
        """
        Persist bytes under a freshly generated name.

        Args:
            data: File contents.
            extension: File extension including the dot.

        Returns:
            The storage reference, e.g. ``/uploads/<uuid>.jpg``.
        """
        filename = f"{uuid.uuid4()}{extension}"
        file_path = self.base_path / filename
        try:
            file_path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to save image: {e}")
        logger.info(f"Saved image: {file_path} ({len(data)} bytes)")
        return f"{URL_PREFIX}{filename}"

    def read(self, ref: str) -> bytes:
        """
        Return the bytes stored under ``ref``.

        Raises:
            FileNotFoundStorageError: If nothing is stored under ``ref``.
        """
        file_path = self._path_for(ref)
        try:
            return file_path.read_bytes()
        except FileNotFoundError:
            raise FileNotFoundStorageError(f"File not found: {ref}")

    def delete(self, ref: str) -> None:
        """
        Remove the file stored under ``ref``.

        Raises:
            FileNotFoundStorageError: If nothing is stored under ``ref``.
            StorageError: If the file exists but cannot be removed.
        """
        file_path = self._path_for(ref)
        try:
            file_path.unlink()
        except FileNotFoundError:
            raise FileNotFoundStorageError(f"File not found: {ref}")
        except OSError as e:
            raise StorageError(f"Failed to delete file {ref}: {e}")
        logger.info(f"Deleted file: {file_path}")

    def exists(self, ref: str) -> bool:
        try:
            return self._path_for(ref).is_file()
        except StorageError:
            return False
