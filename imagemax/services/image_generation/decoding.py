"""
Base64 image decoding for provider responses.

Every function here is pure and reports problems through DecodedImage
instead of raising, so providers can turn them straight into failed results.
"""
import base64
import binascii
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any


class DecodeErrorCode(str, Enum):
    INVALID_ENCODING = "invalid_encoding"
    NO_IMAGE_DATA = "no_image_data"


@dataclass
class DecodedImage:
    success: bool
    buffer: bytes | None = None
    mime_type: str | None = None
    format: str | None = None
    error: str | None = None
    error_code: DecodeErrorCode | None = None

    @classmethod
    def failure(cls, code: DecodeErrorCode, error: str) -> "DecodedImage":
        return cls(success=False, error=error, error_code=code)


DATA_URL_PREFIX = re.compile(r"^data:image/[a-z]+;base64,")
BASE64_ALPHABET = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")

MIME_TYPES = {
    "png": "image/png",
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
}
DEFAULT_MIME_TYPE = "image/png"

# Response fields that may hold base64 payloads; redacted before logging
BASE64_FIELDS = ("b64_json", "image")


def decode_base64_image(payload: str) -> DecodedImage:
    """Decode a base64 (optionally data-URL prefixed) image payload."""
    if not isinstance(payload, str):
        return DecodedImage.failure(DecodeErrorCode.INVALID_ENCODING, "Invalid base64 string")

    encoded = DATA_URL_PREFIX.sub("", payload, count=1)
    if not _is_valid_base64(encoded):
        return DecodedImage.failure(DecodeErrorCode.INVALID_ENCODING, "Invalid base64 string")

    buffer = base64.b64decode(_pad(encoded))
    fmt = detect_image_format(buffer)
    return DecodedImage(
        success=True,
        buffer=buffer,
        mime_type=mime_type_for_format(fmt),
        format=fmt,
    )


def _pad(value: str) -> str:
    stripped = value.rstrip("=")
    return stripped + "=" * (-len(stripped) % 4)


def _is_valid_base64(value: str) -> bool:
    """Alphabet check plus round trip: re-encoding must reproduce the input modulo padding."""
    if not BASE64_ALPHABET.match(value):
        return False
    try:
        decoded = base64.b64decode(_pad(value), validate=True)
    except (binascii.Error, ValueError):
        return False
    reencoded = base64.b64encode(decoded).decode("ascii")
    return reencoded.rstrip("=") == value.rstrip("=")


def detect_image_format(buffer: bytes) -> str:
    """Detect image format from magic numbers. Returns "unknown" if none match."""
    if len(buffer) < 4:
        return "unknown"
    if buffer[:4] == b"\x89PNG":
        return "png"
    if buffer[:3] == b"\xff\xd8\xff":
        return "jpeg"
    if buffer[:4] == b"GIF8":
        return "gif"
    if len(buffer) >= 12 and buffer[:4] == b"RIFF" and buffer[8:12] == b"WEBP":
        return "webp"
    return "unknown"


def mime_type_for_format(fmt: str) -> str:
    return MIME_TYPES.get(fmt.lower(), DEFAULT_MIME_TYPE)


def extract_image_from_response(response_data: Any) -> DecodedImage:
    """
    Locate a base64 payload in a provider response and decode it.

    Accepted shapes, in order: bare string; {"data": "<b64>"};
    {"data": [{"b64_json": "<b64>"}]}; {"image": "<b64>"}.
    """
    payload = _find_base64_payload(response_data)
    if not payload:
        return DecodedImage.failure(
            DecodeErrorCode.NO_IMAGE_DATA,
            "No base64 image data found in response",
        )
    return decode_base64_image(payload)


def _find_base64_payload(response_data: Any) -> str | None:
    if isinstance(response_data, str):
        return response_data
    if not isinstance(response_data, dict):
        return None
    data = response_data.get("data")
    if isinstance(data, str):
        return data
    if isinstance(data, list) and data and isinstance(data[0], dict):
        b64 = data[0].get("b64_json")
        if isinstance(b64, str):
            return b64
    image = response_data.get("image")
    if isinstance(image, str):
        return image
    return None


def validate_image_size(buffer: bytes, max_size_mb: int = 10) -> bool:
    return len(buffer) <= max_size_mb * 1024 * 1024


def _sanitize_value(value: Any) -> Any:
    """Recursively replace base64 data with placeholder."""
    if isinstance(value, dict):
        return {
            k: "[REDACTED]" if k in BASE64_FIELDS and isinstance(v, str) else _sanitize_value(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [_sanitize_value(v) for v in value]
    return value


def sanitize_response_for_log(response_data: Any) -> dict[str, Any]:
    """Return a copy of a provider response safe for logging (no base64 image data)."""
    if not isinstance(response_data, dict):
        return {}
    return _sanitize_value(response_data)
