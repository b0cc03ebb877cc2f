"""
Simulated provider for local development and tests. No network calls.
"""
import random
import time
from typing import Callable

from imagemax.services.image_generation.base import ImageProvider, ImageResult, ProviderKind

DEFAULT_MOCK_IMAGE_URL = "https://aaxr3zh5x0.ufs.sh/f/VKo1Weu7HOuKcjeODcnb2YoPNKSWxHC78qjQ4VZF5nRkBDs9"


class MockProvider(ImageProvider):
    """Sleeps for `delay` seconds, then succeeds with a canned URL or fails at `failure_rate`."""

    kind = ProviderKind.MOCK

    def __init__(
        self,
        name: str,
        delay: float = 2.0,
        failure_rate: float = 0.1,
        image_url: str = DEFAULT_MOCK_IMAGE_URL,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.name = name
        self.delay = delay
        self.failure_rate = failure_rate
        self.image_url = image_url
        self._rng = rng or random.Random()
        self._sleep = sleep

    def get_name(self) -> str:
        return self.name

    def generate_image(self, prompt: str) -> ImageResult:
        if self.delay > 0:
            self._sleep(self.delay)
        if self._rng.random() < self.failure_rate:
            return ImageResult.failed(f"Mock {self.name} service temporarily unavailable")
        return ImageResult.ok(self.image_url)
