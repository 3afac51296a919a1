"""
Remote multimodal backend (Ollama-compatible ``/api/chat``).

The image is read from blob storage, base64-encoded and sent in a single
non-streaming chat request together with a fixed instruction prompt.
The model's answer is then trimmed to one plain sentence.

Storage references reach this module from the database, so they are
checked before any file access: only ``/uploads/<name>.jpg|.jpeg``
references without traversal sequences are accepted.
"""

import base64
import logging
import re
from typing import Any, Dict, Optional

import requests

from photomap.services.storage import URL_PREFIX, BlobStorage, FileNotFoundStorageError
from photomap.services.vision.base import ProviderError, ProviderUnavailable, VisionProvider

logger = logging.getLogger(__name__)

PROMPT = (
    "Describe what you see in this image directly and concisely. Do not use "
    "phrases like 'the image shows', 'this picture depicts', or 'the photo "
    "contains'. Just describe the content directly, for example: 'empty train "
    "tracks with grassy field around it' or 'train tracks with incoming train "
    "in middle of grassy field'. Be specific and descriptive."
)

ALLOWED_EXTENSIONS = (".jpg", ".jpeg")
MAX_REFERENCE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 200
MIN_WORD_BREAK = 150

_MARKDOWN_MARKERS = re.compile(r"^(?:\s*[-*]+\s*|#+\s*)", re.MULTILINE)
_LEAD_INS = (
    re.compile(
        r"^(the\s+)?(image|photo|picture)\s+(shows?|depicts?|displays?|contains?|features?)\s+",
        re.IGNORECASE,
    ),
    re.compile(
        r"^(this\s+)?(image|photo|picture)\s+(shows?|depicts?|displays?|contains?|features?)\s+",
        re.IGNORECASE,
    ),
    re.compile(r"^(in\s+)?(this\s+)?(image|photo|picture)[\s,]+", re.IGNORECASE),
)
_SENTENCE_END = re.compile(r"[.!?]")
_TRAILING_PUNCTUATION = re.compile(r"[.,;:!?]+$")


def clean_description(text: str) -> str:
    """Reduce a raw model answer to a single short description.

    Markdown markers and boilerplate lead-ins are removed, the text is
    cut at the first sentence terminator (or near 200 characters on a
    word boundary) and trailing punctuation is dropped.

    Example:
        >>> clean_description("The image shows a red barn. It is old.")
        'a red barn'
    """
    description = _MARKDOWN_MARKERS.sub("", text.strip()).strip()

    for pattern in _LEAD_INS:
        description = pattern.sub("", description, count=1)
    description = description.strip()

    match = _SENTENCE_END.search(description)
    if match and match.start() > 0:
        description = description[: match.start()].strip()

    if len(description) > MAX_DESCRIPTION_LENGTH:
        truncated = description[:MAX_DESCRIPTION_LENGTH]
        last_space = truncated.rfind(" ")
        if last_space > MIN_WORD_BREAK:
            description = truncated[:last_space].strip()
        else:
            description = truncated.strip()

    return _TRAILING_PUNCTUATION.sub("", description).strip()


def validate_reference(ref: str) -> str:
    """Check that ``ref`` points at a JPEG inside the upload namespace.

    Returns:
        The file name relative to the upload namespace.

    Raises:
        ProviderError: If the reference is outside the namespace, contains
            traversal sequences, is too long or is not a JPEG.
    """
    if not ref.startswith(URL_PREFIX):
        raise ProviderError(f"Invalid image path. Only {URL_PREFIX} paths are allowed.")

    rel = ref[len(URL_PREFIX):]
    if ".." in rel or "\\" in rel or rel.startswith("/"):
        raise ProviderError("Invalid image path.")
    if len(rel) > MAX_REFERENCE_LENGTH:
        raise ProviderError("Invalid image path.")
    if not rel.lower().endswith(ALLOWED_EXTENSIONS):
        raise ProviderError("Invalid image path. Only .jpg/.jpeg files are allowed.")
    return rel


class OllamaVisionProvider(VisionProvider):
    """
    Describes images with a locally hosted multimodal model.

    Attributes:
        base_url: Address of the inference server.
        model: Model name, e.g. ``llava``.
        storage: Blob storage the references resolve against.
        timeout: Optional request timeout in seconds; ``None`` waits forever.
    """

    name = "remote"

    def __init__(
        self,
        storage: BlobStorage,
        base_url: str = "http://localhost:11434",
        model: str = "llava",
        timeout: Optional[float] = None,
    ) -> None:
        self.storage = storage
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout

    def describe_image(self, ref: str) -> str:
        validate_reference(ref)

        try:
            image_bytes = self.storage.read(ref)
        except FileNotFoundStorageError:
            raise ProviderError(f"Image file not found: {ref}")

        payload = {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": PROMPT,
                    "images": [base64.b64encode(image_bytes).decode("ascii")],
                }
            ],
            "stream": False,
        }

        try:
            response = requests.post(
                f"{self.base_url}/api/chat",
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Vision backend request failed: {e}")
            raise ProviderUnavailable(
                f"Cannot connect to vision backend at {self.base_url}. "
                "Make sure it is running."
            )

        if not response.ok:
            raise ProviderError(
                f"Vision backend error ({response.status_code}): "
                f"{response.text or response.reason}"
            )

        description = clean_description(self._extract_content(response))
        if not description:
            raise ProviderError("Vision backend returned an empty description.")
        return description

    def _extract_content(self, response: requests.Response) -> str:
        try:
            data: Any = response.json()
        except ValueError:
            raise ProviderError("Vision backend returned a response that is not JSON.")

        message: Dict[str, Any] = {}
        if isinstance(data, dict) and isinstance(data.get("message"), dict):
            message = data["message"]

        content = message.get("content")
        if isinstance(content, str) and content.strip():
            return content

        keys = ", ".join(data.keys()) if isinstance(data, dict) else type(data).__name__
        logger.error(f"Unexpected vision backend response keys: {keys}")
        raise ProviderError(
            "Unexpected response format from vision backend. "
            f"Expected message.content, got keys: {keys}"
        )
