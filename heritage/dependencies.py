"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from heritage.config import get_settings
from heritage.content import ContentStore, FileContentStore, S3ContentStore
from heritage.db import DbClient, InMemoryDbClient, SqlDbClient
from heritage.upstream import DuckDuckGoClient, UnsplashClient

_db_client: DbClient | None = None
_content_store: ContentStore | None = None
_lookup_client: DuckDuckGoClient | None = None
_image_client: UnsplashClient | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so users and scores persist across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient()
    else:
        _db_client = SqlDbClient(settings.database_url)
    return _db_client


def get_content_store() -> ContentStore:
    global _content_store
    if _content_store:
        return _content_store

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.content_bucket:
        _content_store = FileContentStore(settings.public_dir)
    else:
        _content_store = S3ContentStore(
            bucket=settings.content_bucket,
            prefix=settings.content_prefix,
            region=settings.content_region or "",
            endpoint=settings.content_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
        )
    return _content_store


def get_lookup_client() -> DuckDuckGoClient:
    global _lookup_client
    if _lookup_client:
        return _lookup_client
    settings = get_settings()
    _lookup_client = DuckDuckGoClient(timeout=settings.upstream_timeout)
    return _lookup_client


def get_image_client() -> UnsplashClient:
    global _image_client
    if _image_client:
        return _image_client
    settings = get_settings()
    _image_client = UnsplashClient(
        access_key=settings.unsplash_access_key,
        timeout=settings.upstream_timeout,
    )
    return _image_client
