import secrets
import string
from abc import ABC, abstractmethod
from datetime import datetime, timezone


class StorageError(Exception):
    """Upload failed; message is safe to surface in a failed ImageResult."""


class BlobStorage(ABC):
    backend_name: str = "blob"

    @abstractmethod
    def upload(self, content: bytes, filename: str, content_type: str = "image/png") -> str:
        """Store bytes under filename; returns the public URL. Raises StorageError."""
        raise NotImplementedError

    def close(self) -> None:
        pass


_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def generate_unique_filename(prefix: str = "image", extension: str = "png") -> str:
    """<prefix>-<timestamp>-<random>.<ext>; timestamp has ':' and '.' replaced by '-'."""
    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    timestamp = timestamp.replace(":", "-").replace(".", "-")
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(6))
    return f"{prefix}-{timestamp}-{suffix}.{extension}"
