"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_access_guard,
    get_account_service,
    get_auth_session,
    get_bucket_cache,
    get_catalog_service,
    get_context,
    get_media_workflow,
)
from .config import SettingsDependency, get_app_settings

__all__ = [
    "SettingsDependency",
    "get_access_guard",
    "get_account_service",
    "get_app_settings",
    "get_auth_session",
    "get_bucket_cache",
    "get_catalog_service",
    "get_context",
    "get_media_workflow",
]
