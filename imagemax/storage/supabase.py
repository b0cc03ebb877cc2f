"""
Supabase Storage client using the storage REST API over httpx.
"""
import logging

import httpx

from imagemax.storage.base import BlobStorage, StorageError

logger = logging.getLogger(__name__)


class SupabaseBlobStorage(BlobStorage):
    backend_name = "supabase"

    def __init__(
        self,
        url: str,
        service_key: str,
        bucket: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not url or not service_key:
            raise ValueError("Supabase storage requires supabase_url and supabase_service_key")
        self.url = url.rstrip("/")
        self.bucket = bucket
        self._service_key = service_key
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Lazy initialization of httpx client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=f"{self.url}/storage/v1",
                timeout=self._timeout,
                transport=self._transport,
                headers={
                    "Authorization": f"Bearer {self._service_key}",
                    "apikey": self._service_key,
                },
            )
        return self._client

    def public_url(self, filename: str) -> str:
        return f"{self.url}/storage/v1/object/public/{self.bucket}/{filename}"

    def upload(self, content: bytes, filename: str, content_type: str = "image/png") -> str:
        logger.info(
            "blob_upload_started",
            extra={"backend": self.backend_name, "filename": filename, "size_bytes": len(content)},
        )
        try:
            resp = self.client.post(
                f"/object/{self.bucket}/{filename}",
                content=content,
                headers={
                    "Content-Type": content_type,
                    "cache-control": "max-age=3600",
                    "x-upsert": "false",
                },
            )
        except httpx.HTTPError as e:
            raise StorageError(f"Upload failed: {e}") from e

        if resp.status_code >= 400:
            message = _error_message(resp)
            if "bucket not found" in message.lower():
                logger.error(
                    "blob_bucket_missing",
                    extra={"backend": self.backend_name, "error": f"create bucket '{self.bucket}' in Supabase Storage"},
                )
            raise StorageError(message)

        return self.public_url(filename)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or f"HTTP {resp.status_code}")
    return f"HTTP {resp.status_code}"
