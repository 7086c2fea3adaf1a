"""Health suite — read-only liveness probes, run in parallel.

Infrastructure probes (Supabase, Gemini, Resend) are defined here; the
website and API endpoints come from the service catalog.
"""

from __future__ import annotations

import logging
from typing import Any

from eryai_monitor.catalog import EndpointDef, ServiceCatalog
from eryai_monitor.checks.models import Check, CheckError, RunContext, check_that
from eryai_monitor.clients import HttpClient, ResendSender, SupabaseStore
from eryai_monitor.config import settings

from . import Services

logger = logging.getLogger(__name__)

INFRASTRUCTURE = "Infrastructure"

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


def endpoint_check(endpoint: EndpointDef, http: HttpClient) -> Check:
    """Probe one catalog endpoint and accept 2xx or its listed statuses."""

    async def probe(ctx: RunContext) -> dict[str, Any]:
        result = await http.request(
            endpoint.url,
            method=endpoint.method,
            json=endpoint.body,
            timeout=endpoint.timeout,
        )
        details = {"url": endpoint.url, "statusCode": result.status_code}
        if not endpoint.accepts(result.status_code):
            raise CheckError(f"HTTP {result.status_code}", details=details)
        return details

    return Check(
        name=endpoint.name, category=endpoint.category, probe=probe,
        required=endpoint.required,
        timeout=endpoint.timeout or settings.default_timeout,
    )


def supabase_check(store: SupabaseStore, category: str = INFRASTRUCTURE) -> Check:
    async def probe(ctx: RunContext) -> None:
        await store.select("customers", "id", limit=1)

    return Check(name="Supabase Database", category=category, probe=probe,
                 timeout=settings.default_timeout)


def gemini_check(http: HttpClient, api_key: str = "") -> Check:
    async def probe(ctx: RunContext) -> None:
        key = api_key or settings.gemini_api_key
        check_that(key, "API key missing")
        result = await http.post(
            GEMINI_URL.format(model=settings.gemini_model),
            headers={"x-goog-api-key": key},
            json={
                "contents": [{"role": "user", "parts": [{"text": "Reply with OK"}]}],
                "generationConfig": {"maxOutputTokens": 5},
            },
        )
        check_that(result.ok, f"API error: {result.status_code}")

    return Check(name="Gemini AI API", category=INFRASTRUCTURE, probe=probe,
                 timeout=settings.default_timeout)


def resend_check(sender: ResendSender) -> Check:
    """Validate the Resend key via /domains; sends no email."""

    async def probe(ctx: RunContext) -> None:
        check_that(sender.is_configured, "API key missing")
        await sender.list_domains()

    return Check(name="Resend Email API", category=INFRASTRUCTURE, probe=probe,
                 timeout=settings.default_timeout)


def health_checks(services: Services, catalog: ServiceCatalog) -> list[Check]:
    checks = [
        supabase_check(services.store),
        gemini_check(services.http),
        resend_check(services.email),
    ]
    checks.extend(endpoint_check(e, services.http) for e in catalog.for_suite("health"))
    logger.debug("Health suite: %d checks", len(checks))
    return checks
