"""Concrete check suites for the EryAI deployment.

- health: parallel liveness probes of every service (``/api/health``)
- status: parallel probes behind the public status page (``/api/status``)
- full: the sequential, stateful end-to-end test suite (``/api/test``)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from eryai_monitor.catalog import ServiceCatalog
from eryai_monitor.checks.models import Check, RunMode
from eryai_monitor.clients import HttpClient, ResendSender, SupabaseStore
from eryai_monitor.config import settings


class Suite(str, Enum):
    HEALTH = "health"
    STATUS = "status"
    FULL = "full"

    @property
    def mode(self) -> RunMode:
        return RunMode.SEQUENTIAL if self == Suite.FULL else RunMode.PARALLEL

    @property
    def notifies(self) -> bool:
        return self == Suite.FULL


@dataclass
class Services:
    """The collaborator clients probes talk to."""

    http: HttpClient
    store: SupabaseStore
    email: ResendSender


def build_services() -> Services:
    """Wire collaborator clients from settings."""
    return Services(
        http=HttpClient(timeout=settings.default_timeout),
        store=SupabaseStore(settings.supabase_url, settings.supabase_service_key,
                            timeout=settings.default_timeout),
        email=ResendSender(settings.resend_api_key, base_url=settings.resend_base_url,
                           timeout=settings.default_timeout),
    )


def build_checks(suite: Suite | str, services: Services, catalog: ServiceCatalog) -> list[Check]:
    """Return the check batch for ``suite`` in declaration order."""
    from . import full, health, status

    suite = Suite(suite)
    if suite == Suite.HEALTH:
        return health.health_checks(services, catalog)
    if suite == Suite.STATUS:
        return status.status_checks(services, catalog)
    return full.full_checks(services)
