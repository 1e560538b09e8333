"""
Backend configuration checks.

Probes the tables, buckets and session the back office depends on and reports
what is missing instead of raising, so operators see every problem at once.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from showcase.clients import SupabaseError, SupabaseStorageClient, SupabaseTableClient
from showcase.core.config import AppSettings
from showcase.services.access_guard import AccessGuard
from showcase.services.auth_session import AuthSession
from showcase.services.errors import is_missing_relation

logger = logging.getLogger(__name__)


class TableStatus(BaseModel):
    table: str
    exists: bool
    error: Optional[str] = None


class BucketStatus(BaseModel):
    bucket: str
    exists: bool
    error: Optional[str] = None


class SessionStatus(BaseModel):
    signed_in: bool = False
    user_id: Optional[str] = None
    email: Optional[str] = None
    is_admin: bool = False
    error: Optional[str] = None


class DiagnosticsReport(BaseModel):
    tables: List[TableStatus] = Field(default_factory=list)
    buckets: List[BucketStatus] = Field(default_factory=list)
    session: SessionStatus = Field(default_factory=SessionStatus)

    @property
    def ok(self) -> bool:
        tables_ok = all(status.exists and not status.error for status in self.tables)
        buckets_ok = all(status.exists for status in self.buckets)
        return tables_ok and buckets_ok


async def check_table_exists(tables: SupabaseTableClient, table: str) -> TableStatus:
    """
    Probe ``table`` with a one-row select.

    A missing relation means the table is absent; other service errors mean it
    exists but is not readable with the current credentials.
    """
    try:
        await tables.select(table, limit=1)
    except SupabaseError as exc:
        if exc.network:
            return TableStatus(table=table, exists=False, error=exc.message)
        if is_missing_relation(exc):
            return TableStatus(table=table, exists=False, error="Table does not exist")
        return TableStatus(table=table, exists=True, error=exc.message)
    return TableStatus(table=table, exists=True)


class BackendDiagnostics:
    """Collect table, bucket and session checks into a single report."""

    def __init__(
        self,
        settings: AppSettings,
        *,
        session: AuthSession,
        tables: SupabaseTableClient,
        storage: SupabaseStorageClient,
        guard: AccessGuard,
    ) -> None:
        self._settings = settings
        self._session = session
        self._tables = tables
        self._storage = storage
        self._guard = guard

    async def run(self) -> DiagnosticsReport:
        report = DiagnosticsReport()
        table_names = self._settings.tables
        for table in (table_names.profiles_table, table_names.music_table, table_names.videos_table):
            status = await check_table_exists(self._tables, table)
            logger.info("Table %s: exists=%s error=%s", table, status.exists, status.error)
            report.tables.append(status)

        report.session = await self._check_session()
        report.buckets = await self._check_buckets()
        return report

    async def _check_session(self) -> SessionStatus:
        try:
            identity = await self._session.get_current_identity()
        except SupabaseError as exc:
            return SessionStatus(error=exc.message)
        if identity is None:
            return SessionStatus()
        is_admin = await self._guard.check_if_admin(identity.id)
        return SessionStatus(signed_in=True, user_id=identity.id, email=identity.email, is_admin=is_admin)

    async def _check_buckets(self) -> List[BucketStatus]:
        storage = self._settings.storage
        wanted = list(dict.fromkeys((storage.images_bucket, storage.music_bucket, storage.videos_bucket)))
        try:
            available = {bucket.name for bucket in await self._storage.list_buckets()}
        except SupabaseError as exc:
            logger.error("Bucket listing failed: %s", exc.message)
            return [BucketStatus(bucket=name, exists=False, error=exc.message) for name in wanted]
        return [BucketStatus(bucket=name, exists=name in available) for name in wanted]


__all__ = [
    "BackendDiagnostics",
    "BucketStatus",
    "DiagnosticsReport",
    "SessionStatus",
    "TableStatus",
    "check_table_exists",
]
