"""
Auth service client.

Wraps the hosted auth REST endpoints used for password sign-in, registration,
token refresh and identity lookups.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import httpx

from showcase.core.config import SupabaseSettings
from showcase.schemas.auth import AuthTokens, Identity
from showcase.utils.http import SupabaseError, decode_json, send_request


class SupabaseAuthClient:
    """Stateless calls against the auth endpoints; session state lives elsewhere."""

    _REJECTED_TOKEN_STATUSES = (401, 403)

    def __init__(self, settings: SupabaseSettings, http: httpx.AsyncClient) -> None:
        self._settings = settings
        self._http = http
        self._base_url = f"{settings.url}/auth/v1"

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        return {
            "apikey": self._settings.anon_key,
            "Authorization": f"Bearer {access_token or self._settings.anon_key}",
        }

    async def get_user(self, access_token: str) -> Optional[Identity]:
        """Return the identity bound to ``access_token`` or ``None`` when it is rejected."""
        try:
            response = await send_request(
                self._http.get,
                f"{self._base_url}/user",
                headers=self._headers(access_token),
            )
        except SupabaseError as exc:
            if exc.status_code in self._REJECTED_TOKEN_STATUSES:
                return None
            raise
        payload = decode_json(response, "Looking up the current user")
        if payload is None:
            return None
        if not isinstance(payload, dict):
            raise SupabaseError("User lookup response has an invalid format.")
        if not payload.get("id"):
            return None
        return Identity.from_payload(payload)

    async def sign_up(self, email: str, password: str) -> Tuple[Identity, Optional[AuthTokens]]:
        """
        Register a new user.

        Tokens are only returned when the project auto-confirms new accounts.
        """
        response = await send_request(
            self._http.post,
            f"{self._base_url}/signup",
            headers=self._headers(),
            json={"email": email, "password": password},
        )
        payload = decode_json(response, "Signing up")
        if not isinstance(payload, dict):
            raise SupabaseError("Sign-up response has an invalid format.")
        if payload.get("access_token"):
            return self._decode_session(payload)
        user = payload.get("user") or payload
        if not isinstance(user, dict) or not user.get("id"):
            raise SupabaseError("Sign-up response did not include a user.")
        return Identity.from_payload(user), None

    async def sign_in_with_password(self, email: str, password: str) -> Tuple[Identity, AuthTokens]:
        """Exchange email and password for a token pair."""
        response = await send_request(
            self._http.post,
            f"{self._base_url}/token",
            params={"grant_type": "password"},
            headers=self._headers(),
            json={"email": email, "password": password},
        )
        return self._decode_session(decode_json(response, "Signing in"))

    async def refresh_session(self, refresh_token: str) -> Tuple[Identity, AuthTokens]:
        """Trade a refresh token for a new token pair."""
        response = await send_request(
            self._http.post,
            f"{self._base_url}/token",
            params={"grant_type": "refresh_token"},
            headers=self._headers(),
            json={"refresh_token": refresh_token},
        )
        return self._decode_session(decode_json(response, "Refreshing the session"))

    async def sign_out(self, access_token: str) -> None:
        """Revoke the session bound to ``access_token``."""
        await send_request(
            self._http.post,
            f"{self._base_url}/logout",
            headers=self._headers(access_token),
        )

    @staticmethod
    def _decode_session(payload: Any) -> Tuple[Identity, AuthTokens]:
        if not isinstance(payload, dict):
            raise SupabaseError("Session response has an invalid format.")
        user = payload.get("user")
        access_token = payload.get("access_token")
        if not isinstance(user, dict) or not user or not access_token:
            raise SupabaseError("Incomplete session payload returned by the auth service.")
        tokens = AuthTokens(
            access_token=access_token,
            refresh_token=payload.get("refresh_token"),
            expires_in=payload.get("expires_in"),
        )
        return Identity.from_payload(user), tokens


__all__ = ["SupabaseAuthClient"]
