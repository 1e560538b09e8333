"""
Admin authorization checks.

Two entry points share one profile lookup: ``verify_admin_access`` is the hard
gate in front of every mutation and propagates lookup failures, while
``check_if_admin`` is for display decisions and treats failures as "not admin".
"""

from __future__ import annotations

import logging

from showcase.clients import SupabaseError, SupabaseTableClient
from showcase.schemas.auth import Identity, Profile
from showcase.services.auth_session import AuthSession
from showcase.services.errors import (
    NotAuthenticatedError,
    NotAuthorizedError,
    unreachable,
)

logger = logging.getLogger(__name__)


class AccessGuard:
    """Resolve the caller's identity and admin flag on every call."""

    def __init__(
        self,
        session: AuthSession,
        tables: SupabaseTableClient,
        *,
        profiles_table: str = "profiles",
    ) -> None:
        self._session = session
        self._tables = tables
        self._profiles_table = profiles_table

    async def verify_admin_access(self) -> Identity:
        """Return the admin identity or raise; never falls back to "not admin" on errors."""
        try:
            identity = await self._session.get_current_identity()
        except SupabaseError as exc:
            raise unreachable("Resolving the current user", exc) from exc
        if identity is None:
            raise NotAuthenticatedError()

        try:
            is_admin = await self._lookup_is_admin(identity.id)
        except SupabaseError as exc:
            raise unreachable("Checking administrator access", exc) from exc

        if not is_admin:
            logger.info("User %s denied admin access", identity.id)
            raise NotAuthorizedError()
        return identity

    async def check_if_admin(self, user_id: str | None) -> bool:
        """Best-effort admin check for UI visibility; any failure reads as ``False``."""
        if not user_id:
            return False
        try:
            return await self._lookup_is_admin(user_id)
        except SupabaseError as exc:
            logger.warning("Admin check for %s failed: %s", user_id, exc.message)
            return False

    async def _lookup_is_admin(self, user_id: str) -> bool:
        row = await self._tables.select_one(
            self._profiles_table,
            columns="user_id,is_admin",
            filters={"user_id": user_id},
        )
        if row is None:
            return False
        profile = Profile(user_id=str(row.get("user_id", user_id)), is_admin=bool(row.get("is_admin")))
        return profile.is_admin


__all__ = ["AccessGuard"]
