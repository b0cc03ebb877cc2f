#!/usr/bin/env python3
"""
Upload a local image to the configured blob storage and print its public URL.
Useful for checking storage credentials and bucket setup.
Run from the project root: python -m scripts.upload_image path/to/image.png
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from imagemax.core.config import settings
from imagemax.services.image_generation.decoding import detect_image_format, mime_type_for_format
from imagemax.storage import StorageError, build_storage, generate_unique_filename


def main():
    if len(sys.argv) != 2:
        print("Usage: python -m scripts.upload_image <image-path>")
        sys.exit(2)
    path = sys.argv[1]
    with open(path, "rb") as f:
        content = f.read()

    fmt = detect_image_format(content)
    extension = fmt if fmt != "unknown" else "png"
    filename = generate_unique_filename("mock-image", extension)
    print(f"Uploading {path} ({len(content)} bytes) as {filename} to {settings.storage_backend}")

    storage = build_storage(settings)
    try:
        url = storage.upload(content, filename, mime_type_for_format(fmt))
    except StorageError as e:
        print(f"Upload failed: {e}")
        sys.exit(1)
    finally:
        storage.close()
    print(f"Public URL: {url}")


if __name__ == "__main__":
    main()
