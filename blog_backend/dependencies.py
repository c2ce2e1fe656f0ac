"""
Dependency wiring for the FastAPI app.

The directory and storage clients are created on first use and reused for the
life of the process. Sync routes run in a threadpool, so creation is guarded.
"""

from __future__ import annotations

import logging
import threading

from blog_backend.config import get_settings
from blog_backend.db import DbClient, InMemoryDbClient, SqlDbClient
from blog_backend.storage import InMemoryStorageClient, S3StorageClient, StorageClient

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_db_client: DbClient | None = None
_storage_client: StorageClient | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton directory client so one connection pool serves every
    request.
    """
    global _db_client
    if _db_client:
        return _db_client

    with _lock:
        if _db_client:
            return _db_client
        settings = get_settings()
        if settings.use_in_memory_backends or not settings.database_url:
            logger.warning("DATABASE_URL not set; using in-memory directory")
            _db_client = InMemoryDbClient()
        else:
            _db_client = SqlDbClient(settings.database_url)
            logger.info("Connected directory: %s", _db_client.engine.url.drivername)
    return _db_client


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    with _lock:
        if _storage_client:
            return _storage_client
        settings = get_settings()
        if settings.use_in_memory_backends or not settings.s3_bucket:
            logger.warning("S3_BUCKET not set; using in-memory storage")
            _storage_client = InMemoryStorageClient()
        else:
            _storage_client = S3StorageClient(
                bucket=settings.s3_bucket,
                region=settings.s3_region,
                access_key_id=settings.aws_access_key_id,
                secret_access_key=settings.aws_secret_access_key,
                endpoint=settings.s3_endpoint,
            )
    return _storage_client
