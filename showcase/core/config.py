"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the back-office services
and the maintenance scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class SupabaseSettings(BaseSettings):
    """Connection details for the hosted backend project."""

    model_config = SettingsConfigDict(populate_by_name=True)

    url: str = Field(..., validation_alias="SUPABASE_URL")
    anon_key: str = Field(..., validation_alias="SUPABASE_ANON_KEY")
    service_role_key: Optional[str] = Field(
        None,
        validation_alias="SUPABASE_SERVICE_ROLE_KEY",
        description="Optional privileged key used for project-level lookups such as bucket listing.",
    )
    timeout_seconds: float = Field(10.0, validation_alias="SUPABASE_TIMEOUT")

    @field_validator("url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        """Reject non-HTTP URLs and drop the trailing slash."""
        cleaned = value.strip()
        if not cleaned.startswith(("http://", "https://")):
            raise ValueError("SUPABASE_URL must be an http(s) URL")
        return cleaned.rstrip("/")


class StorageSettings(BaseSettings):
    """Bucket names and upload behaviour for media assets."""

    model_config = SettingsConfigDict(populate_by_name=True)

    images_bucket: str = Field("images", validation_alias="STORAGE_IMAGES_BUCKET")
    music_bucket: str = Field("music", validation_alias="STORAGE_MUSIC_BUCKET")
    videos_bucket: str = Field("videos", validation_alias="STORAGE_VIDEOS_BUCKET")
    cache_control: str = Field("3600", validation_alias="STORAGE_CACHE_CONTROL")
    bucket_cache_ttl_seconds: float = Field(
        300.0,
        validation_alias="BUCKET_CACHE_TTL_SECONDS",
        description="How long a positive bucket existence check is trusted.",
    )


class TableSettings(BaseSettings):
    """Names of the tables backing profiles and the catalog."""

    model_config = SettingsConfigDict(populate_by_name=True)

    profiles_table: str = Field("profiles", validation_alias="PROFILES_TABLE")
    music_table: str = Field("music", validation_alias="MUSIC_TABLE")
    videos_table: str = Field("videos", validation_alias="VIDEOS_TABLE")


class AppSettings(BaseSettings):
    """Root settings object for the back-office application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    tables: TableSettings = Field(default_factory=TableSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "StorageSettings",
    "SupabaseSettings",
    "TableSettings",
    "get_settings",
]
