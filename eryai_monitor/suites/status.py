"""Status suite — the probes behind the public status page."""

from __future__ import annotations

from eryai_monitor.catalog import ServiceCatalog
from eryai_monitor.checks.models import Check

from . import Services
from .health import endpoint_check, supabase_check


def status_checks(services: Services, catalog: ServiceCatalog) -> list[Check]:
    checks = [endpoint_check(e, services.http) for e in catalog.for_suite("status")]
    checks.append(supabase_check(services.store))
    return checks
