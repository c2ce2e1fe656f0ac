"""
Issuance of pre-signed image upload URLs.
"""

from __future__ import annotations

import time

from blog_backend.identity import random_token
from blog_backend.storage import StorageClient

IMAGE_CONTENT_TYPE = "image/jpeg"
IMAGE_EXTENSION = ".jpeg"


def new_image_key() -> str:
    return f"{random_token()}-{int(time.time() * 1000)}{IMAGE_EXTENSION}"


def issue_upload_url(storage: StorageClient, expires_in: int = 600) -> str:
    """
    Return a write-only URL for a fresh object key. Whether the upload ever
    happens is the caller's concern.
    """
    return storage.presign_put(
        new_image_key(), expires_in=expires_in, content_type=IMAGE_CONTENT_TYPE
    )
