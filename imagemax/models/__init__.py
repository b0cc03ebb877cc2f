from imagemax.models.chat import Chat
from imagemax.models.generation_batch import GenerationBatch
from imagemax.models.image_generation import GenerationStatus, ImageGeneration

__all__ = ["Chat", "GenerationBatch", "GenerationStatus", "ImageGeneration"]
