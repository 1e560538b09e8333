"""Read-only access to the music and video catalog."""

from __future__ import annotations

import logging
from typing import List

from showcase.clients import SupabaseError, SupabaseTableClient
from showcase.core.config import StorageSettings, TableSettings
from showcase.schemas.media import MediaKind, MediaLayout, MediaRecord, media_layout
from showcase.services.errors import NotFoundError, is_missing_relation, unreachable

logger = logging.getLogger(__name__)


class MediaCatalogService:
    """List and fetch catalog entries, newest first."""

    def __init__(
        self,
        tables: SupabaseTableClient,
        storage_settings: StorageSettings,
        table_settings: TableSettings,
    ) -> None:
        self._tables = tables
        self._storage_settings = storage_settings
        self._table_settings = table_settings

    def _layout(self, kind: MediaKind) -> MediaLayout:
        return media_layout(kind, self._storage_settings, self._table_settings)

    async def list_media(self, kind: MediaKind) -> List[MediaRecord]:
        layout = self._layout(kind)
        try:
            rows = await self._tables.select(layout.table, order_by="created_at", descending=True)
        except SupabaseError as exc:
            raise self._read_error(layout, exc) from exc
        logger.debug("Fetched %d %s records", len(rows), layout.label)
        return [layout.record_model.model_validate(row) for row in rows]

    async def get_media(self, kind: MediaKind, record_id: str) -> MediaRecord:
        layout = self._layout(kind)
        try:
            row = await self._tables.select_one(layout.table, filters={"id": record_id})
        except SupabaseError as exc:
            raise self._read_error(layout, exc) from exc
        if row is None:
            raise NotFoundError(f"No {layout.label} record with id {record_id}.")
        return layout.record_model.model_validate(row)

    @staticmethod
    def _read_error(layout: MediaLayout, exc: SupabaseError) -> Exception:
        if is_missing_relation(exc):
            return NotFoundError(
                f"The {layout.table} table does not exist; ask an administrator to create it."
            )
        return unreachable(f"Fetching {layout.label} data", exc)


__all__ = ["MediaCatalogService"]
