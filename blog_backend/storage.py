"""
Object storage abstraction for S3 (or any S3-compatible service) and an
in-memory test double.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from blog_backend.errors import UpstreamError


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    def presign_put(
        self, path: str, expires_in: int = 600, content_type: str = "image/jpeg"
    ) -> str:
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"

    def presign_put(
        self, path: str, expires_in: int = 600, content_type: str = "image/jpeg"
    ) -> str:
        return (
            f"{self.base_url}/{path}?op=put&expires={expires_in}"
            f"&content_type={content_type}"
        )


@dataclass
class S3StorageClient:
    """
    Presigns write URLs against an S3 bucket. ``endpoint`` is only needed for
    S3-compatible services other than AWS.
    """

    bucket: str
    region: str
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    endpoint: Optional[str] = None

    def __post_init__(self):
        config = Config(signature_version="s3v4")
        try:
            self._client = boto3.client(
                "s3",
                endpoint_url=self.endpoint or None,
                region_name=self.region,
                aws_access_key_id=self.access_key_id,
                aws_secret_access_key=self.secret_access_key,
                config=config,
            )
        except (BotoCoreError, ValueError) as exc:
            raise UpstreamError("Could not create the S3 client") from exc

    def presign_put(
        self, path: str, expires_in: int = 600, content_type: str = "image/jpeg"
    ) -> str:
        try:
            return self._client.generate_presigned_url(
                ClientMethod="put_object",
                Params={
                    "Bucket": self.bucket,
                    "Key": path,
                    "ContentType": content_type,
                },
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamError(f"Could not presign upload for {path}") from exc
