"""Collaborator clients — HTTP probing, Supabase data store, Resend email.

The core only depends on the protocols below; the concrete clients are
wired in by the suites and the API server.
"""

from __future__ import annotations

from typing import Any, Protocol

from .http import HttpClient, HttpProbeError, HttpResult
from .resend import EmailError, ResendSender
from .supabase import DataStoreError, SupabaseStore


class DataStore(Protocol):
    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]: ...

    async def insert(self, table: str, row: dict[str, Any]) -> list[dict[str, Any]]: ...

    async def delete(self, table: str, filters: dict[str, Any]) -> None: ...


class EmailSender(Protocol):
    async def send(
        self,
        sender: str,
        to: str | list[str],
        subject: str,
        html: str,
        text: str = "",
    ) -> str: ...


__all__ = [
    "DataStore",
    "DataStoreError",
    "EmailError",
    "EmailSender",
    "HttpClient",
    "HttpProbeError",
    "HttpResult",
    "ResendSender",
    "SupabaseStore",
]
