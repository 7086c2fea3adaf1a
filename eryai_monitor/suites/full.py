"""Full test suite — sequential end-to-end checks across every service.

Runs in declaration order with a shared RunContext. The Demo checks create
a real chat session through the Sofia API and store its id under
``session_id``; later checks verify it in Supabase, and cleanup deletes it
after the run.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from eryai_monitor.checks.cleanup import SESSION_KEY
from eryai_monitor.checks.models import Check, Probe, RunContext, check_that
from eryai_monitor.clients import DataStoreError, HttpClient, SupabaseStore
from eryai_monitor.config import settings

from . import Services

TEST_VISITOR = "test-visitor-monitoring"
TEST_HEADERS = {"Content-Type": "application/json", "X-Test-Mode": "true"}
REDIRECT_STATUSES = (200, 302, 307)
SOFIA_TIMEOUT = 15.0
REQUIRED_TABLES = ("customers", "dashboard_users", "chat_sessions", "chat_messages", "notifications")


def _table_missing(exc: DataStoreError) -> bool:
    return "does not exist" in exc.message


async def _chat(
    http: HttpClient, prompt: str, session_id: str | None, timeout: float = SOFIA_TIMEOUT,
) -> dict[str, Any]:
    """POST one visitor message to the Sofia restaurant API."""
    result = await http.post(
        f"{settings.demo_url.rstrip('/')}/api/restaurant",
        headers=TEST_HEADERS,
        json={"prompt": prompt, "sessionId": session_id, "visitorId": TEST_VISITOR},
        timeout=timeout,
    )
    check_that(result.ok, f"API error: {result.status_code}")
    data = result.json()
    return data if isinstance(data, dict) else {}


# ── Landing ──────────────────────────────────────────────────────────────────


def _landing(http: HttpClient) -> list[Check]:
    url = settings.landing_url

    async def page_loads(ctx: RunContext) -> None:
        result = await http.get(url)
        check_that(result.ok, f"Status: {result.status_code}")

    async def demo_link(ctx: RunContext) -> None:
        body = (await http.get(url)).text
        check_that(any(w in body for w in ("demo", "Demo", "prova")), "No demo link found")

    return [
        Check("Page loads", "Landing", page_loads),
        Check("Demo link exists", "Landing", demo_link),
    ]


# ── Demo restaurant ──────────────────────────────────────────────────────────


def _demo(http: HttpClient, store: SupabaseStore) -> list[Check]:
    base = settings.demo_url.rstrip("/")

    async def page_loads(ctx: RunContext) -> None:
        result = await http.get(base)
        check_that(result.ok, f"Status: {result.status_code}")

    async def restaurant_api(ctx: RunContext) -> None:
        data = await _chat(http, "Hej, är ni öppna idag?", None)
        check_that(data.get("response"), "No response from Sofia")
        if data.get("sessionId"):
            ctx.set(SESSION_KEY, data["sessionId"])

    def session_endpoint(path: str) -> Probe:
        async def probe(ctx: RunContext) -> None:
            session_id = ctx.get(SESSION_KEY) or "test"
            result = await http.get(f"{base}{path}?session_id={session_id}")
            check_that(result.ok, f"Status: {result.status_code}")
        return probe

    async def create_session(ctx: RunContext) -> None:
        data = await _chat(http, "Jag vill boka ett bord", ctx.get(SESSION_KEY))
        if data.get("sessionId"):
            ctx.set(SESSION_KEY, data["sessionId"])
        check_that(data.get("sessionId"), "No session ID returned")

    async def session_saved(ctx: RunContext) -> None:
        session_id = ctx.require(SESSION_KEY)
        rows = await store.select("chat_sessions", "id", {"id": session_id}, limit=1)
        check_that(rows, "Session not found in database")

    async def messages_saved(ctx: RunContext) -> None:
        session_id = ctx.require(SESSION_KEY)
        rows = await store.select("chat_messages", "id", {"session_id": session_id})
        check_that(rows, "No messages found")

    async def handoff(ctx: RunContext) -> None:
        data = await _chat(
            http,
            "Jag vill prata med ägaren, min email är test@monitoring.eryai.tech",
            ctx.get(SESSION_KEY),
        )
        check_that(data.get("response"), "No response")

    async def human_takeover(ctx: RunContext) -> None:
        # After a handoff Sofia stays quiet; any 2xx passes
        await _chat(http, "Hallå?", ctx.get(SESSION_KEY))

    return [
        Check("Page loads", "Demo", page_loads),
        Check("Restaurant API health", "Demo", restaurant_api, timeout=SOFIA_TIMEOUT),
        Check("Messages API health", "Demo", session_endpoint("/api/messages")),
        Check("Typing API health", "Demo", session_endpoint("/api/typing")),
        Check("Create chat session", "Demo", create_session, timeout=SOFIA_TIMEOUT),
        Check("Session saved in Supabase", "Demo", session_saved),
        Check("Messages saved in Supabase", "Demo", messages_saved),
        Check("Handoff trigger works", "Demo", handoff, timeout=SOFIA_TIMEOUT),
        Check("Human takeover works", "Demo", human_takeover, timeout=SOFIA_TIMEOUT),
    ]


# ── Dashboards ───────────────────────────────────────────────────────────────


def _dashboard_checks(
    http: HttpClient, category: str, base_url: str, protected_path: str, api_path: str,
) -> list[Check]:
    base = base_url.rstrip("/")

    async def login_page(ctx: RunContext) -> None:
        result = await http.get(f"{base}/login")
        check_that(result.ok, f"Status: {result.status_code}")

    async def redirects(ctx: RunContext) -> None:
        result = await http.get(f"{base}{protected_path}", follow_redirects=False)
        check_that(result.status_code in REDIRECT_STATUSES, f"Unexpected status: {result.status_code}")

    async def api_exists(ctx: RunContext) -> None:
        # 401 / 400 are fine, only a missing route fails
        result = await http.get(f"{base}{api_path}")
        check_that(result.status_code != 404, "API endpoint not found")

    api_name = api_path.rsplit("/", 1)[-1]
    return [
        Check("Login page loads", category, login_page),
        Check("Redirects to login", category, redirects),
        Check(f"API {api_name} endpoint exists", category, api_exists),
    ]


def _sales(http: HttpClient, store: SupabaseStore) -> list[Check]:
    async def leads_table(ctx: RunContext) -> None:
        try:
            await store.select("leads", "id", limit=1)
        except DataStoreError as e:
            check_that(not _table_missing(e), f"Table error: {e.message}")

    checks = _dashboard_checks(http, "Sales", settings.sales_url, "/leads", "/api/leads")
    checks.append(Check("Leads table exists in Supabase", "Sales", leads_table))
    return checks


# ── Supabase ─────────────────────────────────────────────────────────────────


def _supabase(store: SupabaseStore) -> list[Check]:
    async def connection(ctx: RunContext) -> None:
        try:
            await store.select("customers", "id", limit=1)
        except DataStoreError as e:
            raise DataStoreError(f"Connection error: {e.message}", e.code) from e

    async def bella_italia(ctx: RunContext) -> None:
        rows = await store.select("customers", "id,name", {"id": settings.bella_italia_id}, limit=1)
        check_that(rows, "Bella Italia not found")

    async def required_tables(ctx: RunContext) -> None:
        for table in REQUIRED_TABLES:
            try:
                await store.select(table, "id", limit=1)
            except DataStoreError as e:
                check_that(not _table_missing(e), f"Table {table} missing")

    async def typing_columns(ctx: RunContext) -> None:
        try:
            await store.select("chat_sessions", "visitor_typing,staff_typing", limit=1)
        except DataStoreError as e:
            raise DataStoreError(f"Typing columns missing: {e.message}", e.code) from e

    return [
        Check("Connection works", "Supabase", connection),
        Check("Bella Italia exists", "Supabase", bella_italia),
        Check("Required tables exist", "Supabase", required_tables),
        Check("Typing columns exist", "Supabase", typing_columns),
    ]


# ── Email ────────────────────────────────────────────────────────────────────


def _email(key_source: Callable[[], str], client_ready: Callable[[], bool]) -> list[Check]:
    async def key_configured(ctx: RunContext) -> None:
        key = key_source()
        check_that(key, "RESEND_API_KEY not set")
        check_that(key.startswith("re_"), "Invalid Resend API key format")

    async def client_initialized(ctx: RunContext) -> None:
        check_that(client_ready(), "Resend client not initialized")

    return [
        Check("Resend API key configured", "Email", key_configured),
        Check("Can send test email", "Email", client_initialized),
    ]


def full_checks(services: Services) -> list[Check]:
    """The whole suite in run order: Landing, Demo, Dashboard, Sales, Supabase, Email."""
    http, store, email = services.http, services.store, services.email
    return [
        *_landing(http),
        *_demo(http, store),
        *_dashboard_checks(http, "Dashboard", settings.dashboard_url, "/dashboard", "/api/messages"),
        *_sales(http, store),
        *_supabase(store),
        *_email(lambda: email.api_key, lambda: email.is_configured),
    ]
