from imagemax.services.image_generation.providers.mock import MockProvider
from imagemax.services.image_generation.providers.openai import OpenAIProvider

__all__ = ["MockProvider", "OpenAIProvider"]
