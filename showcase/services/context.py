"""
Process-wide wiring of clients, cache and per-session services.

One ``ShowcaseContext`` is built at startup. It owns the shared HTTP client
and the bucket existence cache; everything that depends on who is calling is
built per session from it.
"""

from __future__ import annotations

from typing import Optional

import httpx

from showcase.clients import SupabaseAuthClient, SupabaseStorageClient, SupabaseTableClient
from showcase.core.config import AppSettings
from showcase.services.access_guard import AccessGuard
from showcase.services.accounts import AccountService
from showcase.services.auth_session import AuthSession
from showcase.services.bucket_cache import BucketExistenceCache
from showcase.services.catalog import MediaCatalogService
from showcase.services.diagnostics import BackendDiagnostics
from showcase.services.media_workflow import MediaWriteWorkflow


class ShowcaseContext:
    """Shared handles plus factories for session-scoped services."""

    def __init__(
        self,
        settings: AppSettings,
        *,
        http: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings = settings
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(timeout=settings.supabase.timeout_seconds)
        self.auth_client = SupabaseAuthClient(settings.supabase, self.http)
        # Bucket existence is project-wide, so it is checked with project credentials.
        self.project_storage = SupabaseStorageClient(
            settings.supabase,
            self.http,
            api_key=settings.supabase.service_role_key,
        )
        self.bucket_cache = BucketExistenceCache(
            self.project_storage,
            ttl_seconds=settings.storage.bucket_cache_ttl_seconds,
        )

    def session(
        self, access_token: str | None = None, refresh_token: str | None = None
    ) -> AuthSession:
        return AuthSession(self.auth_client, access_token=access_token, refresh_token=refresh_token)

    def tables(self, session: AuthSession) -> SupabaseTableClient:
        return SupabaseTableClient(
            self.settings.supabase,
            self.http,
            token_getter=lambda: session.access_token,
        )

    def storage(self, session: AuthSession) -> SupabaseStorageClient:
        return SupabaseStorageClient(
            self.settings.supabase,
            self.http,
            token_getter=lambda: session.access_token,
        )

    def access_guard(self, session: AuthSession) -> AccessGuard:
        return AccessGuard(
            session,
            self.tables(session),
            profiles_table=self.settings.tables.profiles_table,
        )

    def media_workflow(self, session: AuthSession) -> MediaWriteWorkflow:
        return MediaWriteWorkflow(
            guard=self.access_guard(session),
            session=session,
            tables=self.tables(session),
            storage=self.storage(session),
            bucket_cache=self.bucket_cache,
            storage_settings=self.settings.storage,
            table_settings=self.settings.tables,
        )

    def catalog(self, session: AuthSession) -> MediaCatalogService:
        return MediaCatalogService(self.tables(session), self.settings.storage, self.settings.tables)

    def accounts(self, session: AuthSession) -> AccountService:
        return AccountService(
            session,
            self.tables(session),
            profiles_table=self.settings.tables.profiles_table,
        )

    def diagnostics(self, session: AuthSession) -> BackendDiagnostics:
        return BackendDiagnostics(
            self.settings,
            session=session,
            tables=self.tables(session),
            storage=self.project_storage,
            guard=self.access_guard(session),
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()


__all__ = ["ShowcaseContext"]
