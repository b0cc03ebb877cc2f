"""
Base classes and types for image generation providers.
Used by the factory, the orchestrator and all providers (mock, openai).
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class ProviderKind(str, Enum):
    """Tag carried by every concrete provider class."""

    MOCK = "mock"
    EXTERNAL_API = "external_api"


@dataclass
class ImageResult:
    """Outcome of one provider call. Failure is a value, never an exception."""
    image_url: str | None
    success: bool
    error: str | None = None

    @classmethod
    def ok(cls, image_url: str) -> "ImageResult":
        return cls(image_url=image_url, success=True)

    @classmethod
    def failed(cls, error: str) -> "ImageResult":
        return cls(image_url=None, success=False, error=error)


class ImageProvider(ABC):
    """Base class for image generation providers."""

    kind: ProviderKind

    @abstractmethod
    def get_name(self) -> str:
        """Provider name stored on each generation record (e.g. "dalle")."""
        pass

    def is_available(self) -> bool:
        """Override if the provider needs credentials or other configuration."""
        return True

    @abstractmethod
    def generate_image(self, prompt: str) -> ImageResult:
        """
        Generate one image for the prompt.

        Implementations must not raise: network, decode and upload faults are
        mapped to ImageResult.failed(...).
        """
        pass
