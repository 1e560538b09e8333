"""
Table store client.

Thin wrapper over the REST table endpoints supporting equality filters,
ordering, inserts returning the stored row, and filtered deletes.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional

import httpx

from showcase.core.config import SupabaseSettings
from showcase.utils.http import SupabaseError, decode_json, send_request

TokenGetter = Callable[[], Optional[str]]


class SupabaseTableClient:
    """Select, insert and delete rows on behalf of the current session."""

    def __init__(
        self,
        settings: SupabaseSettings,
        http: httpx.AsyncClient,
        *,
        token_getter: TokenGetter | None = None,
    ) -> None:
        self._settings = settings
        self._http = http
        self._token_getter = token_getter
        self._base_url = f"{settings.url}/rest/v1"

    def _headers(self, **extra: str) -> Dict[str, str]:
        token = self._token_getter() if self._token_getter else None
        headers = {
            "apikey": self._settings.anon_key,
            "Authorization": f"Bearer {token or self._settings.anon_key}",
        }
        headers.update(extra)
        return headers

    @staticmethod
    def _filter_params(filters: Mapping[str, Any] | None) -> Dict[str, str]:
        return {column: f"eq.{value}" for column, value in (filters or {}).items()}

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> List[Dict[str, Any]]:
        """Return rows matching every equality filter."""
        params = {"select": columns, **self._filter_params(filters)}
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(limit)

        response = await send_request(
            self._http.get,
            f"{self._base_url}/{table}",
            params=params,
            headers=self._headers(),
        )
        rows = decode_json(response, f"Reading {table}")
        if not isinstance(rows, list):
            raise SupabaseError(f"Unexpected response shape when reading {table}.")
        return rows

    async def select_one(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
    ) -> Optional[Dict[str, Any]]:
        """Return the first matching row or ``None``."""
        rows = await self.select(table, columns=columns, filters=filters, limit=1)
        return rows[0] if rows else None

    async def insert(self, table: str, row: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it as stored, including generated columns."""
        response = await send_request(
            self._http.post,
            f"{self._base_url}/{table}",
            json=[dict(row)],
            headers=self._headers(Prefer="return=representation"),
        )
        rows = decode_json(response, f"Inserting into {table}")
        if not isinstance(rows, list) or not rows:
            raise SupabaseError(f"Insert into {table} returned no row.")
        return rows[0]

    async def delete(self, table: str, *, filters: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """
        Delete rows matching every equality filter and return the removed rows.

        Row-level security refuses deletes silently, so an empty list means
        nothing was removed.
        """
        if not filters:
            raise ValueError("Refusing to delete without a filter")
        response = await send_request(
            self._http.delete,
            f"{self._base_url}/{table}",
            params=self._filter_params(filters),
            headers=self._headers(Prefer="return=representation"),
        )
        rows = decode_json(response, f"Deleting from {table}")
        if not isinstance(rows, list):
            raise SupabaseError(f"Unexpected response shape when deleting from {table}.")
        return rows


__all__ = ["SupabaseTableClient", "TokenGetter"]
