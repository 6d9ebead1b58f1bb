"""
Configuration and settings for the heritage backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Database (MySQL/Postgres/SQLite via SQLAlchemy URL)
    database_url: Optional[str] = Field(default=None, env="DATABASE_URL")

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "HERITAGE_USE_IN_MEMORY_BACKENDS", "use_in_memory_backends"
        ),
    )

    # Static pages and JSON content
    public_dir: str = Field(default="public", env="PUBLIC_DIR")
    data_dir: str = Field(default="data", env="DATA_DIR")

    # Optional S3-compatible bucket holding the JSON content documents
    content_bucket: Optional[str] = Field(default=None, env="CONTENT_BUCKET")
    content_prefix: str = Field(default="", env="CONTENT_PREFIX")
    content_region: Optional[str] = Field(default=None, env="CONTENT_REGION")
    content_endpoint: Optional[str] = Field(default=None, env="CONTENT_ENDPOINT")
    aws_access_key_id: Optional[str] = Field(
        default=None, env="AWS_ACCESS_KEY_ID"
    )
    aws_secret_access_key: Optional[str] = Field(
        default=None, env="AWS_SECRET_ACCESS_KEY"
    )

    # Upstream providers
    unsplash_access_key: str = Field(default="", env="UNSPLASH_ACCESS_KEY")
    upstream_timeout: float = Field(default=15.0, env="UPSTREAM_TIMEOUT")

    cors_origins: list[str] = Field(default=["*"], env="CORS_ORIGINS")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
