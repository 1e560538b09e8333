"""
Factory functions to provide the shared context and session-scoped services
as FastAPI dependencies.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Header

from showcase.core.config import get_settings
from showcase.services import (
    AccessGuard,
    AccountService,
    AuthSession,
    BucketExistenceCache,
    MediaCatalogService,
    MediaWriteWorkflow,
    ShowcaseContext,
)


@lru_cache()
def get_context() -> ShowcaseContext:
    """Create the process-wide context on first use."""
    return ShowcaseContext(get_settings())


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_auth_session(
    authorization: Annotated[Optional[str], Header()] = None,
) -> AuthSession:
    """Build a session bound to the caller's bearer token, if any."""
    return get_context().session(access_token=_bearer_token(authorization))


def get_access_guard(session: Annotated[AuthSession, Depends(get_auth_session)]) -> AccessGuard:
    return get_context().access_guard(session)


def get_media_workflow(
    session: Annotated[AuthSession, Depends(get_auth_session)],
) -> MediaWriteWorkflow:
    return get_context().media_workflow(session)


def get_catalog_service(
    session: Annotated[AuthSession, Depends(get_auth_session)],
) -> MediaCatalogService:
    return get_context().catalog(session)


def get_account_service(
    session: Annotated[AuthSession, Depends(get_auth_session)],
) -> AccountService:
    return get_context().accounts(session)


def get_bucket_cache() -> BucketExistenceCache:
    return get_context().bucket_cache


__all__ = [
    "get_access_guard",
    "get_account_service",
    "get_auth_session",
    "get_bucket_cache",
    "get_catalog_service",
    "get_context",
    "get_media_workflow",
]
