"""Minimal Supabase data-store client over the PostgREST HTTP interface.

Supports the three operations the monitor needs: select, insert and
delete, each filtered by column equality.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class DataStoreError(Exception):
    """Raised when Supabase rejects a query or cannot be reached."""

    def __init__(self, message: str, code: str = "", status_code: int | None = None) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    @property
    def details(self) -> dict[str, Any]:
        # Set only when Supabase answered; transport failures carry none
        return {"statusCode": self.status_code} if self.status_code is not None else {}


def _eq_params(filters: dict[str, Any] | None) -> dict[str, str]:
    return {col: f"eq.{val}" for col, val in (filters or {}).items()}


class SupabaseStore:
    """Async PostgREST client authenticated with the service role key."""

    def __init__(
        self,
        url: str,
        service_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = url.rstrip("/")
        self._key = service_key
        self._timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._base_url and self._key)

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self._key,
            "Authorization": f"Bearer {self._key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        table: str,
        params: dict[str, str] | None = None,
        json_data: Any = None,
        prefer: str = "",
    ) -> Any:
        if not self.is_configured:
            raise DataStoreError("Supabase is not configured")

        headers = self._headers
        if prefer:
            headers["Prefer"] = prefer
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.request(
                    method,
                    f"{self._base_url}/rest/v1/{table}",
                    headers=headers,
                    params=params,
                    json=json_data,
                )
        except httpx.TimeoutException:
            raise DataStoreError("Supabase request timed out")
        except httpx.HTTPError as e:
            raise DataStoreError(f"Supabase unreachable: {e}")

        if resp.status_code >= 400:
            message, code = resp.text, ""
            try:
                body = resp.json()
                message = body.get("message", resp.text)
                code = body.get("code", "") or ""
            except Exception:
                pass
            raise DataStoreError(str(message), str(code), status_code=resp.status_code)

        if not resp.content:
            return []
        return resp.json()

    # ── Operations ───────────────────────────────────────────────────────

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        params = {"select": columns, **_eq_params(filters)}
        if limit is not None:
            params["limit"] = str(limit)
        rows = await self._request("GET", table, params=params)
        return list(rows or [])

    async def insert(self, table: str, row: dict[str, Any]) -> list[dict[str, Any]]:
        rows = await self._request("POST", table, json_data=row, prefer="return=representation")
        return list(rows or [])

    async def delete(self, table: str, filters: dict[str, Any]) -> None:
        if not filters:
            # PostgREST refuses unfiltered deletes; fail early with a clear message
            raise DataStoreError(f"Refusing to delete from {table} without a filter")
        await self._request("DELETE", table, params=_eq_params(filters))
        logger.debug("Deleted from %s where %s", table, filters)
