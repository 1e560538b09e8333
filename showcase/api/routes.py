"""
FastAPI routes for the media showcase back office.
"""

from __future__ import annotations

import base64
import binascii
import logging
from http import HTTPStatus
from typing import Annotated, Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException

from showcase.clients import SupabaseError
from showcase.core.config import AppSettings
from showcase.dependencies import (
    get_access_guard,
    get_account_service,
    get_app_settings,
    get_auth_session,
    get_bucket_cache,
    get_catalog_service,
    get_media_workflow,
)
from showcase.schemas import (
    BucketStatusResponse,
    CredentialsPayload,
    CurrentUserResponse,
    DeleteMediaResult,
    MediaAttachment,
    MediaCreateRequest,
    MediaFile,
    MediaKind,
    SessionResponse,
)
from showcase.services import (
    AccessGuard,
    AccountService,
    AuthSession,
    BucketExistenceCache,
    MediaCatalogService,
    MediaWriteWorkflow,
)
from showcase.services.errors import (
    AuthenticationFailedError,
    BucketNotFoundError,
    MissingRequiredAssetError,
    NotAuthenticatedError,
    NotAuthorizedError,
    NotFoundError,
    ShowcaseError,
    unreachable,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _http_error(exc: ShowcaseError) -> HTTPException:
    """Translate a service failure into an HTTP response."""
    if isinstance(exc, (NotAuthenticatedError, AuthenticationFailedError)):
        return HTTPException(status_code=HTTPStatus.UNAUTHORIZED, detail=exc.message)
    if isinstance(exc, NotAuthorizedError):
        return HTTPException(status_code=HTTPStatus.FORBIDDEN, detail=exc.message)
    if isinstance(exc, MissingRequiredAssetError):
        return HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=exc.message)
    if isinstance(exc, BucketNotFoundError):
        return HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail={
                "message": exc.message,
                "bucket": exc.bucket,
                "available_buckets": exc.available,
            },
        )
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=exc.message)
    return HTTPException(status_code=HTTPStatus.BAD_GATEWAY, detail=exc.message)


def _decode_attachment(attachment: Optional[MediaAttachment]) -> Optional[MediaFile]:
    if attachment is None:
        return None
    try:
        payload = base64.b64decode(attachment.file_b64, validate=True)
    except (ValueError, binascii.Error) as exc:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail=f"Attachment {attachment.filename} is not valid base64.",
        ) from exc
    return MediaFile(
        filename=attachment.filename,
        content_type=attachment.mime_type,
        data=payload,
    )


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck(settings: Annotated[AppSettings, Depends(get_app_settings)]) -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok", "environment": settings.environment}


@router.post("/auth/sign-up", status_code=HTTPStatus.CREATED, response_model=SessionResponse)
async def sign_up(
    payload: CredentialsPayload,
    accounts: Annotated[AccountService, Depends(get_account_service)],
) -> SessionResponse:
    try:
        return await accounts.sign_up(payload.email, payload.password)
    except ShowcaseError as exc:
        raise _http_error(exc) from exc


@router.post("/auth/sign-in", response_model=SessionResponse)
async def sign_in(
    payload: CredentialsPayload,
    accounts: Annotated[AccountService, Depends(get_account_service)],
) -> SessionResponse:
    try:
        return await accounts.sign_in(payload.email, payload.password)
    except ShowcaseError as exc:
        raise _http_error(exc) from exc


@router.post("/auth/sign-out", status_code=HTTPStatus.NO_CONTENT)
async def sign_out(accounts: Annotated[AccountService, Depends(get_account_service)]) -> None:
    try:
        await accounts.sign_out()
    except ShowcaseError as exc:
        raise _http_error(exc) from exc


@router.get("/auth/me", response_model=CurrentUserResponse)
async def current_user(
    session: Annotated[AuthSession, Depends(get_auth_session)],
    guard: Annotated[AccessGuard, Depends(get_access_guard)],
) -> CurrentUserResponse:
    """Report who is calling and whether admin controls should be shown."""
    try:
        identity = await session.get_current_identity()
    except SupabaseError as exc:
        raise _http_error(unreachable("Resolving the current user", exc)) from exc
    if identity is None:
        return CurrentUserResponse()
    is_admin = await guard.check_if_admin(identity.id)
    return CurrentUserResponse(user=identity, is_admin=is_admin)


@router.get("/media/{kind}")
async def list_media(
    kind: MediaKind,
    catalog: Annotated[MediaCatalogService, Depends(get_catalog_service)],
) -> List[dict[str, Any]]:
    try:
        records = await catalog.list_media(kind)
    except ShowcaseError as exc:
        raise _http_error(exc) from exc
    return [record.model_dump(mode="json") for record in records]


@router.get("/media/{kind}/{record_id}")
async def get_media(
    kind: MediaKind,
    record_id: str,
    catalog: Annotated[MediaCatalogService, Depends(get_catalog_service)],
) -> dict[str, Any]:
    try:
        record = await catalog.get_media(kind, record_id)
    except ShowcaseError as exc:
        raise _http_error(exc) from exc
    return record.model_dump(mode="json")


@router.post("/admin/media/{kind}", status_code=HTTPStatus.CREATED)
async def add_media(
    kind: MediaKind,
    payload: MediaCreateRequest,
    workflow: Annotated[MediaWriteWorkflow, Depends(get_media_workflow)],
) -> dict[str, Any]:
    """Upload the submitted assets and create the catalog entry."""
    primary_file = _decode_attachment(payload.primary_file)
    aux_file = _decode_attachment(payload.aux_file)
    try:
        record = await workflow.add_media(
            kind,
            payload.title,
            payload.description,
            primary_file,
            aux_file,
        )
    except ShowcaseError as exc:
        logger.warning("Adding %s failed: %s", kind.value, exc.message)
        raise _http_error(exc) from exc
    return record.model_dump(mode="json")


@router.delete("/admin/media/{kind}/{record_id}", response_model=DeleteMediaResult)
async def delete_media(
    kind: MediaKind,
    record_id: str,
    workflow: Annotated[MediaWriteWorkflow, Depends(get_media_workflow)],
) -> DeleteMediaResult:
    try:
        return await workflow.delete_media(kind, record_id)
    except ShowcaseError as exc:
        logger.warning("Deleting %s %s failed: %s", kind.value, record_id, exc.message)
        raise _http_error(exc) from exc


@router.get("/admin/buckets/{bucket}", response_model=BucketStatusResponse)
async def check_bucket(
    bucket: str,
    guard: Annotated[AccessGuard, Depends(get_access_guard)],
    cache: Annotated[BucketExistenceCache, Depends(get_bucket_cache)],
) -> BucketStatusResponse:
    """Confirm an upload target exists, listing the alternatives when it does not."""
    try:
        await guard.verify_admin_access()
        await cache.ensure(bucket)
    except ShowcaseError as exc:
        raise _http_error(exc) from exc
    return BucketStatusResponse(bucket=bucket)


__all__ = ["router"]
