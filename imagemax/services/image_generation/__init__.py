"""
Image generation service with multi-provider fan-out.
"""
from .base import ImageProvider, ImageResult, ProviderKind
from .decoding import (
    DecodedImage,
    DecodeErrorCode,
    decode_base64_image,
    extract_image_from_response,
    validate_image_size,
)
from .factory import ImageProviderFactory
from .failure_types import FailureType
from .orchestrator import GeneratedImage, GenerationOrchestrator, GenerationOutcome

__all__ = [
    "ImageProvider",
    "ImageResult",
    "ProviderKind",
    "DecodedImage",
    "DecodeErrorCode",
    "decode_base64_image",
    "extract_image_from_response",
    "validate_image_size",
    "ImageProviderFactory",
    "FailureType",
    "GeneratedImage",
    "GenerationOrchestrator",
    "GenerationOutcome",
]
