"""Object storage client for uploading and removing media assets."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional
from urllib.parse import quote, unquote, urlparse

import httpx

from showcase.clients.supabase_tables import TokenGetter
from showcase.core.config import SupabaseSettings
from showcase.schemas.media import Bucket
from showcase.utils.http import SupabaseError, decode_json, send_request


class SupabaseStorageClient:
    """Bucket listing, uploads, removals and public URL helpers."""

    _PUBLIC_SEGMENT = "/storage/v1/object/public/"

    def __init__(
        self,
        settings: SupabaseSettings,
        http: httpx.AsyncClient,
        *,
        api_key: str | None = None,
        token_getter: TokenGetter | None = None,
    ) -> None:
        self._settings = settings
        self._http = http
        self._api_key = api_key or settings.anon_key
        self._token_getter = token_getter
        self._base_url = f"{settings.url}/storage/v1"

    def _headers(self, **extra: str) -> Dict[str, str]:
        token = self._token_getter() if self._token_getter else None
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {token or self._api_key}",
        }
        headers.update(extra)
        return headers

    async def list_buckets(self) -> List[Bucket]:
        """Return every bucket visible to the configured credentials."""
        response = await send_request(
            self._http.get,
            f"{self._base_url}/bucket",
            headers=self._headers(),
        )
        payload = decode_json(response, "Listing buckets")
        if not isinstance(payload, list):
            raise SupabaseError("Bucket list response has an invalid format.")
        return [Bucket.from_payload(item) for item in payload]

    async def upload(
        self,
        bucket: str,
        key: str,
        data: bytes,
        *,
        content_type: str = "application/octet-stream",
        cache_control: str = "3600",
        upsert: bool = False,
    ) -> str:
        """Store ``data`` under ``bucket/key`` and return the stored key."""
        await send_request(
            self._http.post,
            f"{self._base_url}/object/{bucket}/{quote(key)}",
            content=data,
            headers=self._headers(
                **{
                    "Content-Type": content_type,
                    "cache-control": f"max-age={cache_control}",
                    "x-upsert": "true" if upsert else "false",
                }
            ),
        )
        return key

    async def remove(self, bucket: str, keys: Iterable[str]) -> None:
        """Delete the given object keys from ``bucket``."""
        await send_request(
            self._http.request,
            "DELETE",
            f"{self._base_url}/object/{bucket}",
            json={"prefixes": list(keys)},
            headers=self._headers(),
        )

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self._settings.url}{self._PUBLIC_SEGMENT}{bucket}/{quote(key)}"

    def object_key_from_url(self, bucket: str, url: str) -> Optional[str]:
        """Recover the object key from a public URL issued for ``bucket``."""
        path = urlparse(url).path
        marker = f"{self._PUBLIC_SEGMENT}{bucket}/"
        index = path.find(marker)
        if index < 0:
            return None
        key = unquote(path[index + len(marker):])
        return key or None


__all__ = ["SupabaseStorageClient"]
