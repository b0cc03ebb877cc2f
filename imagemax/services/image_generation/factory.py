"""
Factory selecting the active image providers from configuration.
"""
import logging

from imagemax.services.image_generation.base import ImageProvider
from imagemax.services.image_generation.providers.mock import MockProvider
from imagemax.services.image_generation.providers.openai import OpenAIProvider
from imagemax.storage.base import BlobStorage

logger = logging.getLogger(__name__)


# (name, simulated delay in seconds), in dispatch order
MOCK_PROVIDERS = (
    ("dalle", 2.0),
    ("stability", 3.0),
    ("midjourney", 4.0),
)


class ImageProviderFactory:
    """Builds the provider set for one request from settings.mock_images."""

    # Production registry; add new external providers here
    PROVIDERS = {
        "dalle": OpenAIProvider,
    }

    def __init__(self, settings, storage: BlobStorage) -> None:
        self.settings = settings
        self.storage = storage

    def get_providers(self) -> list[ImageProvider]:
        if self.settings.mock_images:
            return self.create_mock_providers()
        return [self.create(name) for name in self.settings.image_provider_names]

    def create_mock_providers(self) -> list[ImageProvider]:
        return [
            MockProvider(
                name,
                delay,
                failure_rate=self.settings.mock_failure_rate,
                image_url=self.settings.mock_image_url,
            )
            for name, delay in MOCK_PROVIDERS
        ]

    def create(self, provider_name: str) -> ImageProvider:
        """
        Create a production provider by name.

        Raises:
            ValueError: If provider name is unknown
        """
        provider_class = self.PROVIDERS.get(provider_name.lower())
        if not provider_class:
            available = ", ".join(self.PROVIDERS.keys())
            raise ValueError(
                f"Unknown provider: {provider_name}. "
                f"Available providers: {available}"
            )

        provider = provider_class(self._config_for(provider_name), self.storage)
        if not provider.is_available():
            logger.warning("provider_not_configured", extra={"provider": provider_name})
        return provider

    def _config_for(self, provider_name: str) -> dict:
        if provider_name == "dalle":
            return {
                "api_key": self.settings.openai_api_key,
                "base_url": self.settings.openai_api_base_url,
                "model": self.settings.openai_image_model,
                "size": self.settings.openai_image_size,
                "timeout": self.settings.openai_request_timeout,
                "max_image_size_mb": self.settings.max_image_size_mb,
            }
        raise ValueError(f"Provider {provider_name} not supported in settings")

    @classmethod
    def get_available_providers(cls) -> list[str]:
        return list(cls.PROVIDERS.keys())
