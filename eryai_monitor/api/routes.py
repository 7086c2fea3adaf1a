"""API routes for running check suites.

Endpoints:
  GET /api/health   — parallel health probes (JSON or HTML)
  GET /api/status   — public status page (JSON or HTML)
  GET /api/test     — sequential full test suite, emails on failure
  GET /api/notifier — alert configuration status
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, JSONResponse

from eryai_monitor.api.render import http_status_for, render_html, render_status_html, status_page_dict
from eryai_monitor.checks.models import HealthReport
from eryai_monitor.suites import Suite, build_checks

logger = logging.getLogger(__name__)

router = APIRouter()


def _wants_json(request: Request) -> bool:
    return "application/json" in request.headers.get("accept", "")


async def run_suite(request: Request, suite: Suite) -> HealthReport:
    """Build and run ``suite`` with the app's shared collaborators."""
    state = request.app.state
    checks = build_checks(suite, state.services, state.catalog)
    return await state.orchestrator.run_all(suite.mode, checks, notify=suite.notifies)


@router.get("/health")
async def health(request: Request) -> Any:
    report = await run_suite(request, Suite.HEALTH)
    if _wants_json(request):
        return JSONResponse(report.to_dict(), status_code=http_status_for(report.overall_status))
    return HTMLResponse(render_html(report, "EryAI Health Check"))


@router.get("/status")
async def status(request: Request) -> Any:
    page = status_page_dict(await run_suite(request, Suite.STATUS))
    if _wants_json(request):
        return JSONResponse(page)
    return HTMLResponse(render_status_html(page))


@router.get("/test")
async def full_test(request: Request) -> Any:
    report = await run_suite(request, Suite.FULL)
    if _wants_json(request):
        return JSONResponse(report.to_dict(), status_code=http_status_for(report.overall_status))
    return HTMLResponse(render_html(report, "EryAI Test Suite"))


@router.get("/notifier")
def notifier_status(request: Request) -> dict[str, Any]:
    notifier = request.app.state.orchestrator.notifier
    if notifier is None:
        return {"enabled": False, "to": ""}
    return notifier.status()
