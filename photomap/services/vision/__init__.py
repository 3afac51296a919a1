"""Vision providers: pluggable backends that describe stored images.

``VISION_PROVIDER`` selects the backend once at startup:

- ``mock``: deterministic offline text (default)
- ``remote``: live inference call (``ollama`` is accepted as an alias)

Unknown or empty values fall back to ``mock``.
"""

import logging

from photomap.core.config import Settings
from photomap.services.storage import BlobStorage
from photomap.services.vision.base import (
    ProviderError,
    ProviderUnavailable,
    VisionProvider,
    VisionProviderFailure,
)
from photomap.services.vision.mock import MockVisionProvider
from photomap.services.vision.ollama import OllamaVisionProvider

logger = logging.getLogger(__name__)

REMOTE_ALIASES = {"remote", "ollama"}

__all__ = [
    "MockVisionProvider",
    "OllamaVisionProvider",
    "ProviderError",
    "ProviderUnavailable",
    "VisionProvider",
    "VisionProviderFailure",
    "get_vision_provider",
]


def get_vision_provider(settings: Settings, storage: BlobStorage) -> VisionProvider:
    """Build the configured vision backend.

    Args:
        settings: Application settings.
        storage: Blob storage used by backends that need the image bytes.

    Returns:
        A ready-to-use provider.
    """
    choice = (settings.VISION_PROVIDER or "").strip().lower()

    if choice in REMOTE_ALIASES:
        provider: VisionProvider = OllamaVisionProvider(
            storage=storage,
            base_url=settings.OLLAMA_BASE_URL,
            model=settings.OLLAMA_MODEL,
            timeout=settings.VISION_REQUEST_TIMEOUT,
        )
    else:
        if choice != "mock":
            logger.warning(f"Unknown vision provider {settings.VISION_PROVIDER!r}, defaulting to mock")
        provider = MockVisionProvider(delay=settings.MOCK_PROVIDER_DELAY)

    logger.info(f"Vision provider selected: {provider.name}")
    return provider
