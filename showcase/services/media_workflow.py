"""
Business logic for adding and removing catalog entries.

Add uploads assets before inserting the row, so a row never references a
missing object. Delete removes the row before its objects, so a failed
cleanup leaves stray objects rather than dangling references.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from showcase.clients import SupabaseError, SupabaseStorageClient, SupabaseTableClient
from showcase.core.config import StorageSettings, TableSettings
from showcase.schemas.media import (
    DeleteMediaResult,
    MediaFile,
    MediaKind,
    MediaLayout,
    MediaRecord,
    PartialCleanupFailure,
    media_layout,
)
from showcase.services.access_guard import AccessGuard
from showcase.services.auth_session import AuthSession
from showcase.services.bucket_cache import BucketExistenceCache
from showcase.services.errors import (
    MissingRequiredAssetError,
    NotAuthenticatedError,
    NotAuthorizedError,
    NotFoundError,
    UploadFailedError,
    classify_backend_error,
    unreachable,
)

logger = logging.getLogger(__name__)


class MediaWriteWorkflow:
    """Coordinate admin gate, asset uploads and row writes for one session."""

    def __init__(
        self,
        *,
        guard: AccessGuard,
        session: AuthSession,
        tables: SupabaseTableClient,
        storage: SupabaseStorageClient,
        bucket_cache: BucketExistenceCache,
        storage_settings: StorageSettings,
        table_settings: TableSettings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._guard = guard
        self._session = session
        self._tables = tables
        self._storage = storage
        self._buckets = bucket_cache
        self._storage_settings = storage_settings
        self._table_settings = table_settings
        self._clock = clock

    def layout(self, kind: MediaKind) -> MediaLayout:
        return media_layout(kind, self._storage_settings, self._table_settings)

    async def add_media(
        self,
        kind: MediaKind,
        title: str,
        description: str,
        primary_file: Optional[MediaFile],
        aux_file: Optional[MediaFile] = None,
    ) -> MediaRecord:
        """Upload the assets, then insert and return the new record."""
        await self._guard.verify_admin_access()
        layout = self.layout(kind)
        logger.info("Adding %s %r", layout.label, title)

        if primary_file is None:
            asset = "an audio file" if kind is MediaKind.MUSIC else "a video file"
            raise MissingRequiredAssetError(f"Adding {layout.label} requires {asset}.")

        aux_url = None
        if aux_file is not None:
            aux_url = await self.upload_file(aux_file, layout.aux_bucket)
        primary_url = await self.upload_file(primary_file, layout.primary_bucket)

        try:
            identity = await self._session.get_current_identity()
        except SupabaseError as exc:
            raise unreachable("Resolving the current user", exc) from exc
        if identity is None:
            raise NotAuthenticatedError("Session ended before the record could be saved.")

        row = {
            "title": title,
            "description": description,
            layout.aux_field: aux_url,
            layout.primary_field: primary_url,
            "created_by": identity.id,
        }
        try:
            stored = await self._tables.insert(layout.table, row)
        except SupabaseError as exc:
            orphaned = [url for url in (aux_url, primary_url) if url]
            logger.warning(
                "Insert into %s failed; uploaded objects left in storage: %s",
                layout.table,
                ", ".join(orphaned),
            )
            raise unreachable(f"Adding {layout.label} record", exc) from exc

        record = layout.record_model.model_validate(stored)
        logger.info("Added %s %s", layout.label, record.id)
        return record

    async def delete_media(self, kind: MediaKind, record_id: str) -> DeleteMediaResult:
        """Delete the row, then clean up its assets; cleanup failures become warnings."""
        await self._guard.verify_admin_access()
        layout = self.layout(kind)
        logger.info("Deleting %s %s", layout.label, record_id)

        try:
            row = await self._tables.select_one(
                layout.table,
                columns=f"{layout.primary_field},{layout.aux_field}",
                filters={"id": record_id},
            )
        except SupabaseError as exc:
            raise unreachable(f"Loading {layout.label} {record_id}", exc) from exc
        if row is None:
            raise NotFoundError(f"No {layout.label} record with id {record_id}.")

        try:
            deleted = await self._tables.delete(layout.table, filters={"id": record_id})
        except SupabaseError as exc:
            raise unreachable(f"Deleting {layout.label} record", exc) from exc
        if not deleted:
            # Row still references its assets; leave them in place.
            logger.warning("Delete of %s %s removed no rows", layout.label, record_id)
            raise NotAuthorizedError(
                f"The {layout.label} record {record_id} was not deleted; "
                "the backend refused the delete. Check the table's row-level security policies."
            )

        warnings: List[PartialCleanupFailure] = []
        for bucket, url in (
            (layout.primary_bucket, row.get(layout.primary_field)),
            (layout.aux_bucket, row.get(layout.aux_field)),
        ):
            if not url:
                continue
            failure = await self._remove_object(bucket, url)
            if failure is not None:
                warnings.append(failure)

        logger.info("Deleted %s %s (%d cleanup warnings)", layout.label, record_id, len(warnings))
        return DeleteMediaResult(kind=kind, record_id=str(record_id), warnings=warnings)

    async def upload_file(self, media_file: MediaFile, bucket: str) -> str:
        """Upload one asset after confirming the bucket exists; returns its public URL."""
        logger.info("Uploading %s to bucket %s", media_file.filename, bucket)
        await self._buckets.ensure(bucket)

        key = f"{int(self._clock() * 1000)}_{media_file.filename}"
        try:
            await self._storage.upload(
                bucket,
                key,
                media_file.data,
                content_type=media_file.content_type,
                cache_control=self._storage_settings.cache_control,
                upsert=False,
            )
        except SupabaseError as exc:
            raise self._upload_error(bucket, exc) from exc

        url = self._storage.public_url(bucket, key)
        logger.info("Uploaded %s", url)
        return url

    async def _remove_object(self, bucket: str, url: str) -> Optional[PartialCleanupFailure]:
        key = self._storage.object_key_from_url(bucket, url)
        if key is None:
            message = f"Could not derive a storage key from {url}"
        else:
            try:
                await self._storage.remove(bucket, [key])
                return None
            except SupabaseError as exc:
                message = f"Removing {key} from {bucket} failed: {exc.message}"
        logger.warning(message)
        return PartialCleanupFailure(bucket=bucket, url=url, message=message)

    @staticmethod
    def _upload_error(bucket: str, exc: SupabaseError) -> UploadFailedError:
        text = exc.message.lower()
        if exc.status_code == 409 or "duplicate" in text or "already exists" in text:
            message = "File name conflict; retry later or rename the file."
        elif "permission denied" in text or "row-level security" in text or exc.status_code == 403:
            message = f"Insufficient permissions to upload to bucket {bucket}."
        else:
            message = f"File upload failed: {exc.message}"
        return UploadFailedError(message, category=classify_backend_error(exc), detail=exc.message)


__all__ = ["MediaWriteWorkflow"]
