"""
Session state for one signed-in (or anonymous) caller.

Tokens are held here; the identity itself is never cached because
authorization decisions must reflect the latest state on the auth service.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, List, Optional

from showcase.clients import SupabaseAuthClient, SupabaseError
from showcase.schemas.auth import AuthEvent, AuthEventType, AuthTokens, Identity
from showcase.services.errors import AuthenticationFailedError

logger = logging.getLogger(__name__)

AuthListener = Callable[[AuthEvent], Awaitable[None]]


class AuthSubscription:
    """Handle returned by ``AuthSession.on_identity_change``."""

    def __init__(self, session: "AuthSession", listener: AuthListener) -> None:
        self._session = session
        self._listener = listener
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._session._remove_listener(self._listener)


class AuthSession:
    """Token holder with typed identity-change notifications."""

    def __init__(
        self,
        auth_client: SupabaseAuthClient,
        *,
        access_token: str | None = None,
        refresh_token: str | None = None,
    ) -> None:
        self._auth = auth_client
        self._access_token = access_token
        self._refresh_token = refresh_token
        self._listeners: List[AuthListener] = []
        self._last_identity: Optional[Identity] = None

    @property
    def access_token(self) -> Optional[str]:
        return self._access_token

    @property
    def refresh_token(self) -> Optional[str]:
        return self._refresh_token

    async def get_current_identity(self) -> Optional[Identity]:
        """Ask the auth service who owns the current token; ``None`` when signed out."""
        if not self._access_token:
            return None
        identity = await self._auth.get_user(self._access_token)
        previous = self._last_identity
        self._last_identity = identity
        if identity is not None and previous is not None and previous.id == identity.id and previous != identity:
            await self._emit(AuthEventType.USER_UPDATED, identity)
        return identity

    async def sign_in(self, email: str, password: str) -> tuple[Identity, AuthTokens]:
        try:
            identity, tokens = await self._auth.sign_in_with_password(email, password)
        except SupabaseError as exc:
            raise AuthenticationFailedError(f"Sign-in failed: {exc.message}") from exc
        self._store(identity, tokens)
        logger.info("Signed in user %s", identity.id)
        await self._emit(AuthEventType.SIGNED_IN, identity)
        return identity, tokens

    async def sign_up(self, email: str, password: str) -> tuple[Identity, Optional[AuthTokens]]:
        try:
            identity, tokens = await self._auth.sign_up(email, password)
        except SupabaseError as exc:
            raise AuthenticationFailedError(f"Sign-up failed: {exc.message}") from exc
        logger.info("Registered user %s", identity.id)
        if tokens is not None:
            self._store(identity, tokens)
            await self._emit(AuthEventType.SIGNED_IN, identity)
        return identity, tokens

    async def refresh(self) -> AuthTokens:
        if not self._refresh_token:
            raise AuthenticationFailedError("No refresh token is available for this session.")
        try:
            identity, tokens = await self._auth.refresh_session(self._refresh_token)
        except SupabaseError as exc:
            raise AuthenticationFailedError(f"Token refresh failed: {exc.message}") from exc
        self._store(identity, tokens)
        await self._emit(AuthEventType.TOKEN_REFRESHED, identity)
        return tokens

    async def sign_out(self) -> None:
        """Revoke the token remotely, then forget it locally."""
        if not self._access_token:
            return
        try:
            await self._auth.sign_out(self._access_token)
        except SupabaseError as exc:
            raise AuthenticationFailedError(f"Sign-out failed: {exc.message}") from exc
        self._access_token = None
        self._refresh_token = None
        self._last_identity = None
        logger.info("Signed out")
        await self._emit(AuthEventType.SIGNED_OUT, None)

    def on_identity_change(self, listener: AuthListener) -> AuthSubscription:
        """Register ``listener`` for future events only; past events are not replayed."""
        self._listeners.append(listener)
        return AuthSubscription(self, listener)

    def _remove_listener(self, listener: AuthListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _store(self, identity: Identity, tokens: AuthTokens) -> None:
        self._access_token = tokens.access_token
        if tokens.refresh_token:
            self._refresh_token = tokens.refresh_token
        self._last_identity = identity

    async def _emit(self, event_type: AuthEventType, identity: Optional[Identity]) -> None:
        event = AuthEvent(type=event_type, identity=identity)
        for listener in list(self._listeners):
            try:
                await listener(event)
            except Exception:  # pylint: disable=broad-except
                logger.exception("Auth listener failed while handling %s", event_type.value)


__all__ = ["AuthListener", "AuthSession", "AuthSubscription"]
