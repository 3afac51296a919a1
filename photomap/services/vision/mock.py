"""Deterministic offline vision backend."""

import time

from photomap.services.vision.base import VisionProvider

MOCK_DESCRIPTION = "A photo taken near railway tracks and vegetation."


class MockVisionProvider(VisionProvider):
    """Always succeeds with the same description after a fixed delay."""

    name = "mock"

    def __init__(self, delay: float = 0.5) -> None:
        self.delay = delay

    def describe_image(self, ref: str) -> str:
        if self.delay > 0:
            time.sleep(self.delay)
        return MOCK_DESCRIPTION
