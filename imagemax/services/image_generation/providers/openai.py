"""
OpenAI DALL-E provider for image generation.
"""
import logging
import time
from typing import Any

from openai import APIError, APIStatusError, OpenAI

from imagemax.services.image_generation.base import ImageProvider, ImageResult, ProviderKind
from imagemax.services.image_generation.decoding import (
    extract_image_from_response,
    sanitize_response_for_log,
    validate_image_size,
)
from imagemax.storage.base import BlobStorage, StorageError, generate_unique_filename
from imagemax.utils.metrics import image_uploads_total

logger = logging.getLogger(__name__)


class OpenAIProvider(ImageProvider):
    """
    OpenAI DALL-E image generation provider.

    Requests base64 output; the decoded image is uploaded to blob storage and
    the public URL is returned. A plain URL in the response is passed through.
    """

    kind = ProviderKind.EXTERNAL_API
    name = "dalle"

    def __init__(self, config: dict, storage: BlobStorage, client: OpenAI | None = None):
        self.config = config
        self.storage = storage
        self.api_key = config.get("api_key")
        self.model = config.get("model") or "dall-e-2"
        self.size = config.get("size") or "1024x1024"
        self.timeout = config.get("timeout", 120.0)
        self.max_image_size_mb = config.get("max_image_size_mb", 10)

        if client is not None:
            self.client = client
        elif self.api_key:
            self.client = OpenAI(
                api_key=self.api_key,
                timeout=self.timeout,
                base_url=config.get("base_url"),
            )
        else:
            self.client = None

    def is_available(self) -> bool:
        """Check if OpenAI is configured."""
        return self.client is not None

    def get_name(self) -> str:
        return self.name

    def generate_image(self, prompt: str) -> ImageResult:
        if not self.is_available():
            return ImageResult.failed("OPENAI_API_KEY environment variable is required")
        try:
            data = self._request(prompt)
        except APIStatusError as e:
            return ImageResult.failed(f"DALL-E API error: {e.status_code} - {_upstream_message(e)}")
        except APIError as e:
            logger.warning("dalle_request_failed", extra={"provider": self.name, "error": str(e)})
            return ImageResult.failed(str(e) or "DALL-E generation failed")
        except Exception as e:
            logger.exception("dalle_generation_error", extra={"provider": self.name})
            return ImageResult.failed(str(e) or "DALL-E generation failed")

        first = _first_item(data)
        if first.get("b64_json"):
            return self._store_base64(data)
        if first.get("url"):
            logger.info("dalle_url_response", extra={"provider": self.name})
            return ImageResult.ok(first["url"])

        logger.warning(
            "dalle_empty_response",
            extra={"provider": self.name, "error": str(sanitize_response_for_log(data))},
        )
        return ImageResult.failed("No image data returned from DALL-E API")

    def _request(self, prompt: str) -> dict[str, Any]:
        response = self.client.images.generate(
            model=self.model,
            prompt=prompt,
            n=1,
            size=self.size,
            response_format="b64_json",
        )
        return response.model_dump()

    def _store_base64(self, data: dict[str, Any]) -> ImageResult:
        decoded = extract_image_from_response(data)
        if not decoded.success or decoded.buffer is None:
            return ImageResult.failed(decoded.error or "Failed to decode base64 image")
        if not validate_image_size(decoded.buffer, self.max_image_size_mb):
            return ImageResult.failed(f"Decoded image exceeds {self.max_image_size_mb} MB")

        extension = decoded.format if decoded.format and decoded.format != "unknown" else "png"
        filename = generate_unique_filename("dalle", extension)
        started = time.monotonic()
        try:
            url = self.storage.upload(decoded.buffer, filename, decoded.mime_type or "image/png")
        except StorageError as e:
            image_uploads_total.labels(backend=self.storage.backend_name, status="failed").inc()
            logger.warning(
                "dalle_upload_failed",
                extra={"provider": self.name, "filename": filename, "error": str(e)},
            )
            return ImageResult.failed(str(e) or "Failed to upload image")
        except Exception as e:
            image_uploads_total.labels(backend=self.storage.backend_name, status="failed").inc()
            logger.exception(
                "dalle_upload_error",
                extra={"provider": self.name, "filename": filename},
            )
            return ImageResult.failed(str(e) or "Failed to upload image")

        image_uploads_total.labels(backend=self.storage.backend_name, status="ok").inc()
        logger.info(
            "dalle_image_uploaded",
            extra={
                "provider": self.name,
                "filename": filename,
                "size_bytes": len(decoded.buffer),
                "latency_ms": int((time.monotonic() - started) * 1000),
            },
        )
        return ImageResult.ok(url)


def _first_item(data: dict[str, Any]) -> dict[str, Any]:
    items = data.get("data") if isinstance(data, dict) else None
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return {}


def _upstream_message(error: APIStatusError) -> str:
    body = error.body
    if isinstance(body, dict):
        nested = body.get("error")
        if isinstance(nested, dict) and nested.get("message"):
            return str(nested["message"])
        if body.get("message"):
            return str(body["message"])
    return error.message
