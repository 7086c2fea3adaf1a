"""Service catalog — loads services.yaml and provides typed endpoint models.

The catalog lists the plain HTTP endpoints probed by the health and status
suites and the set of critical services. URLs may reference settings with
``{landing_url}``-style placeholders. A missing or malformed file falls
back to the built-in defaults.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from eryai_monitor.checks.aggregator import DEFAULT_CRITICAL_SERVICES
from eryai_monitor.config import settings

logger = logging.getLogger(__name__)

CATALOG_PATH = Path(__file__).resolve().parent.parent / "services.yaml"

NIL_SESSION = "00000000-0000-0000-0000-000000000000"


# ── Data models ──────────────────────────────────────────────────────────────


@dataclass
class EndpointDef:
    """One HTTP endpoint probed by a suite."""

    name: str
    category: str
    url: str
    method: str = "GET"
    accept_status: list[int] = field(default_factory=list)  # empty = any 2xx
    body: dict[str, Any] | None = None
    timeout: float | None = None
    required: bool = True
    suites: list[str] = field(default_factory=lambda: ["health"])

    def accepts(self, status_code: int) -> bool:
        if 200 <= status_code < 300:
            return True
        return status_code in self.accept_status


DEFAULT_ENDPOINTS: list[dict[str, Any]] = [
    {"name": "Landing Page", "category": "Websites", "url": "{landing_url}",
     "suites": ["health", "status"]},
    {"name": "Demo Restaurant", "category": "Websites", "url": "{demo_url}",
     "suites": ["health", "status"]},
    {"name": "Customer Dashboard", "category": "Websites", "url": "{dashboard_url}",
     "suites": ["health", "status"]},
    {"name": "Sales Dashboard", "category": "Websites", "url": "{sales_url}",
     "suites": ["health", "status"]},
    # 400 means the API is up and rejected the probe prompt
    {"name": "Sofia AI API", "category": "APIs", "url": "{demo_url}/api/restaurant",
     "method": "POST", "body": {"prompt": "health check"}, "accept_status": [400],
     "timeout": 15.0, "suites": ["health", "status"]},
    {"name": "Messages API", "category": "APIs",
     "url": "{demo_url}/api/messages?session_id=" + NIL_SESSION, "suites": ["health"]},
    {"name": "Typing API", "category": "APIs",
     "url": "{demo_url}/api/typing?session_id=" + NIL_SESSION, "suites": ["health"]},
]


# ── Catalog ──────────────────────────────────────────────────────────────────


class ServiceCatalog:
    """Loads and caches endpoint definitions from services.yaml."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or (Path(settings.catalog_path) if settings.catalog_path else CATALOG_PATH)
        self._endpoints: list[EndpointDef] = []
        self._critical: frozenset[str] = DEFAULT_CRITICAL_SERVICES
        self._loaded = False

    def load(self, force: bool = False) -> list[EndpointDef]:
        """Parse services.yaml and return the endpoint list."""
        if self._loaded and not force:
            return self._endpoints

        raw: dict[str, Any] = {}
        if not self._path.exists():
            logger.warning("Catalog file not found: %s — using defaults", self._path)
        else:
            try:
                raw = yaml.safe_load(self._path.read_text(encoding="utf-8")) or {}
            except Exception as e:
                logger.error("Failed to parse %s: %s — using defaults", self._path, e)
                raw = {}
        if not isinstance(raw, dict):
            logger.error("Catalog %s is not a mapping — using defaults", self._path)
            raw = {}

        entries = raw.get("endpoints") or DEFAULT_ENDPOINTS
        self._endpoints = []
        for entry in entries:
            try:
                self._endpoints.append(_parse_endpoint(entry))
            except Exception as e:
                logger.warning("Skipping malformed endpoint entry: %s", e)

        critical = raw.get("critical_services")
        self._critical = frozenset(critical) if critical else DEFAULT_CRITICAL_SERVICES

        self._loaded = True
        logger.info("Loaded %d endpoints from catalog", len(self._endpoints))
        return self._endpoints

    @property
    def endpoints(self) -> list[EndpointDef]:
        return self.load()

    @property
    def critical_services(self) -> frozenset[str]:
        self.load()
        return self._critical

    def for_suite(self, suite: str) -> list[EndpointDef]:
        return [e for e in self.endpoints if suite in e.suites]

    def get(self, name: str) -> EndpointDef | None:
        return next((e for e in self.endpoints if e.name == name), None)

    def reload(self) -> list[EndpointDef]:
        """Force reload from disk."""
        return self.load(force=True)


# ── Parsing helpers ──────────────────────────────────────────────────────────


def _expand(url: str) -> str:
    return url.format(
        landing_url=settings.landing_url.rstrip("/"),
        demo_url=settings.demo_url.rstrip("/"),
        dashboard_url=settings.dashboard_url.rstrip("/"),
        sales_url=settings.sales_url.rstrip("/"),
    )


def _parse_endpoint(entry: dict[str, Any]) -> EndpointDef:
    name = str(entry["name"]).strip()
    if not name:
        raise ValueError("Endpoint 'name' is required")
    timeout = entry.get("timeout")
    return EndpointDef(
        name=name,
        category=str(entry.get("category", "Websites")),
        url=_expand(str(entry["url"])),
        method=str(entry.get("method", "GET")).upper(),
        accept_status=[int(s) for s in entry.get("accept_status", []) or []],
        body=entry.get("body"),
        timeout=float(timeout) if timeout is not None else None,
        required=bool(entry.get("required", True)),
        suites=list(entry.get("suites", ["health"]) or ["health"]),
    )
