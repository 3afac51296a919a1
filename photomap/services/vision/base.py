"""Vision provider interface and failure kinds."""

from abc import ABC, abstractmethod


class VisionProviderFailure(Exception):
    """Base class for every failure of a vision backend.

    The message is stored verbatim on the photo as ``ai_error``.
    """


class ProviderUnavailable(VisionProviderFailure):
    """The backend could not be reached over the network."""


class ProviderError(VisionProviderFailure):
    """The backend replied with an error or an unusable payload, or the
    image could not be loaded."""


class VisionProvider(ABC):
    """Produces a short textual description of a stored image."""

    name: str = "base"

    @abstractmethod
    def describe_image(self, ref: str) -> str:
        """Describe the image stored under ``ref``.

        Implementations may block; callers run them off the event loop.

        Raises:
            ProviderUnavailable: The backend is unreachable.
            ProviderError: Any other backend or input failure.
        """
        raise NotImplementedError
