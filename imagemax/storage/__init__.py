from imagemax.storage.base import BlobStorage, StorageError, generate_unique_filename
from imagemax.storage.factory import build_storage

__all__ = ["BlobStorage", "StorageError", "build_storage", "generate_unique_filename"]
