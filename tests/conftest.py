"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from eryai_monitor.checks.models import Check, CheckError, RunContext
from eryai_monitor.clients import DataStoreError


def make_check(
    name: str,
    category: str = "Demo",
    fail: str | None = None,
    required: bool = True,
    timeout: float = 10.0,
    delay: float = 0.0,
) -> Check:
    """A check whose probe optionally sleeps, then passes or fails with ``fail``."""

    async def probe(ctx: RunContext) -> None:
        if delay:
            await asyncio.sleep(delay)
        if fail is not None:
            raise CheckError(fail)

    return Check(name=name, category=category, probe=probe, required=required, timeout=timeout)


class FakeStore:
    """In-memory stand-in for the Supabase client."""

    def __init__(self, tables: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self.tables = tables if tables is not None else {}
        self.deleted: list[tuple[str, dict[str, Any]]] = []
        self.fail_on: dict[str, str] = {}

    def _check(self, table: str) -> None:
        if table in self.fail_on:
            raise DataStoreError(self.fail_on[table])

    async def select(self, table, columns="*", filters=None, limit=None):
        self._check(table)
        rows = [
            r for r in self.tables.get(table, [])
            if all(r.get(k) == v for k, v in (filters or {}).items())
        ]
        return rows[:limit] if limit is not None else rows

    async def insert(self, table, row):
        self._check(table)
        self.tables.setdefault(table, []).append(row)
        return [row]

    async def delete(self, table, filters):
        self._check(table)
        self.deleted.append((table, dict(filters)))
        self.tables[table] = [
            r for r in self.tables.get(table, [])
            if not all(r.get(k) == v for k, v in filters.items())
        ]


class FakeSender:
    """Records emails instead of sending them."""

    def __init__(self, error: Exception | None = None, configured: bool = True) -> None:
        self.sent: list[dict[str, Any]] = []
        self.error = error
        self.is_configured = configured

    async def send(self, sender, to, subject, html, text=""):
        if self.error is not None:
            raise self.error
        self.sent.append({"from": sender, "to": to, "subject": subject, "html": html, "text": text})
        return "msg_1"


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def sender() -> FakeSender:
    return FakeSender()
