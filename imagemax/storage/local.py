import logging
import os

from imagemax.storage.base import BlobStorage, StorageError

logger = logging.getLogger(__name__)


class LocalBlobStorage(BlobStorage):
    """Writes files to a directory served under public_base_url."""

    backend_name = "local"

    def __init__(self, base_path: str, public_base_url: str) -> None:
        self.base_path = base_path
        self.public_base_url = public_base_url.rstrip("/")

    def upload(self, content: bytes, filename: str, content_type: str = "image/png") -> str:
        if os.path.basename(filename) != filename:
            raise StorageError(f"Invalid file name: {filename}")
        path = os.path.join(self.base_path, filename)
        if os.path.exists(path):
            raise StorageError(f"The resource already exists: {filename}")
        try:
            os.makedirs(self.base_path, exist_ok=True)
            with open(path, "xb") as f:
                f.write(content)
        except OSError as e:
            raise StorageError(str(e)) from e
        logger.info(
            "blob_uploaded",
            extra={"backend": self.backend_name, "filename": filename, "size_bytes": len(content)},
        )
        return f"{self.public_base_url}/{filename}"
