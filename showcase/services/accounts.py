"""
Account registration and sign-in.

New accounts get a profile row with ``is_admin`` off; admin rights are granted
out of band by editing that row.
"""

from __future__ import annotations

import logging

from showcase.clients import SupabaseError, SupabaseTableClient
from showcase.schemas.auth import Identity, SessionResponse
from showcase.services.auth_session import AuthSession

logger = logging.getLogger(__name__)


class AccountService:
    """Sign-up with profile bootstrap, sign-in and sign-out for one session."""

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

    async def sign_up(self, email: str, password: str) -> SessionResponse:
        identity, tokens = await self._session.sign_up(email, password)
        await self._create_profile(identity)
        if tokens is None:
            return SessionResponse(user=identity)
        return SessionResponse(
            user=identity,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_in=tokens.expires_in,
        )

    async def sign_in(self, email: str, password: str) -> SessionResponse:
        identity, tokens = await self._session.sign_in(email, password)
        return SessionResponse(
            user=identity,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_in=tokens.expires_in,
        )

    async def sign_out(self) -> None:
        await self._session.sign_out()

    async def _create_profile(self, identity: Identity) -> None:
        # The account exists even when the profile insert fails.
        try:
            await self._tables.insert(
                self._profiles_table,
                {"user_id": identity.id, "is_admin": False},
            )
        except SupabaseError as exc:
            logger.error("Creating profile for %s failed: %s", identity.id, exc.message)


__all__ = ["AccountService"]
