from imagemax.storage.base import BlobStorage
from imagemax.storage.local import LocalBlobStorage
from imagemax.storage.supabase import SupabaseBlobStorage


def build_storage(settings) -> BlobStorage:
    """Create the blob storage backend selected by settings.storage_backend."""
    if settings.storage_backend == "supabase":
        return SupabaseBlobStorage(
            url=settings.supabase_url,
            service_key=settings.supabase_service_key,
            bucket=settings.supabase_bucket_name,
            timeout=settings.supabase_timeout,
        )
    return LocalBlobStorage(settings.storage_base_path, settings.storage_public_base_url)
