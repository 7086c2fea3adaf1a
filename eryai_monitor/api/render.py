"""Report rendering — status-page JSON and compact HTML pages."""

from __future__ import annotations

import html
from collections.abc import Iterable
from typing import Any

from eryai_monitor.checks.models import CheckOutcome, HealthReport, OutcomeStatus, OverallStatus

HTTP_STATUS = {
    OverallStatus.OK: 200,
    OverallStatus.DEGRADED: 200,
    OverallStatus.CRITICAL: 503,
}

# Public status page vocabulary
_PAGE_HEADLINE = {
    "operational": "🟢 All Systems Operational",
    "partial_outage": "🟡 Partial System Outage",
    "major_outage": "🔴 Major System Outage",
}

_PAGE_COLORS = {
    "operational": ("#064e3b", "#6ee7b7"),
    "partial_outage": ("#78350f", "#fcd34d"),
    "major_outage": ("#7f1d1d", "#fca5a5"),
}

_STATE_LABEL = {"operational": "Operational", "degraded": "Degraded", "down": "Down"}
_STATE_CLASS = {"operational": "passed", "degraded": "skipped", "down": "failed"}

_HEADLINE = {
    OverallStatus.OK: "✅ All Systems Operational",
    OverallStatus.DEGRADED: "⚠️ Partial Degradation",
    OverallStatus.CRITICAL: "🚨 Critical Issues Detected",
}

_COLORS = {
    OverallStatus.OK: ("#064e3b", "#6ee7b7"),
    OverallStatus.DEGRADED: ("#78350f", "#fcd34d"),
    OverallStatus.CRITICAL: ("#7f1d1d", "#fca5a5"),
}

_STYLE = """
* { margin: 0; padding: 0; box-sizing: border-box; }
body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
       background: #0f172a; color: #e2e8f0; padding: 40px 20px; }
.container { max-width: 800px; margin: 0 auto; }
h1 { font-size: 1.8rem; margin-bottom: 16px; }
.overall { display: inline-block; padding: 14px 28px; border-radius: 50px;
           font-weight: 600; margin-bottom: 24px; }
.section-title { font-size: 0.9rem; color: #64748b; text-transform: uppercase;
                 letter-spacing: 1px; margin: 20px 0 10px; }
.check { display: flex; justify-content: space-between; background: #1e293b;
         padding: 12px 18px; border-radius: 10px; margin-bottom: 8px; }
.passed { color: #22c55e; } .failed { color: #ef4444; } .skipped { color: #f59e0b; }
.error { color: #f87171; font-size: 0.8rem; margin-top: 2px; }
.time { color: #64748b; font-size: 0.85rem; }
.url { color: #94a3b8; font-size: 0.8rem; margin-top: 2px; }
.footer { margin-top: 32px; color: #475569; font-size: 0.85rem; text-align: center; }
.footer a { color: #64748b; margin: 0 8px; }
"""


def http_status_for(status: OverallStatus) -> int:
    return HTTP_STATUS[status]


def service_state(outcome: CheckOutcome) -> str:
    """operational, degraded (answered with a bad status) or down (unreachable)."""
    if outcome.status == OutcomeStatus.PASSED:
        return "operational"
    return "degraded" if "statusCode" in outcome.details else "down"


def page_status(states: Iterable[str]) -> str:
    """major_outage if anything is down, operational if everything is up."""
    states = list(states)
    if "down" in states:
        return "major_outage"
    if all(s == "operational" for s in states):
        return "operational"
    return "partial_outage"


def status_page_dict(report: HealthReport) -> dict[str, Any]:
    """Status page JSON: one entry per service with its URL and status code."""
    services = []
    for o in report.outcomes:
        entry: dict[str, Any] = {"name": o.name}
        if "url" in o.details:
            entry["url"] = o.details["url"]
        entry["status"] = service_state(o)
        if "statusCode" in o.details:
            entry["statusCode"] = o.details["statusCode"]
        entry["responseTime"] = o.duration_ms
        if o.error is not None:
            entry["error"] = o.error
        services.append(entry)
    return {
        "status": page_status(s["status"] for s in services),
        "timestamp": report.started_at.isoformat(),
        "services": services,
    }


def render_status_html(page: dict[str, Any]) -> str:
    """Public status page built from ``status_page_dict`` output."""
    overall = page["status"]
    bg, fg = _PAGE_COLORS[overall]
    rows = []
    for service in page["services"]:
        url = f'<div class="url">{html.escape(service["url"])}</div>' if "url" in service else ""
        state = service["status"]
        rows.append(
            f'<div class="check"><div>{html.escape(service["name"])}{url}</div>'
            f'<div><span class="time">{service["responseTime"]}ms</span> '
            f'<span class="{_STATE_CLASS[state]}">●</span> {_STATE_LABEL[state]}</div></div>'
        )

    return f"""<!DOCTYPE html>
<html lang="sv">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>EryAI System Status</title>
<style>{_STYLE}</style>
</head>
<body>
<div class="container">
<h1>EryAI System Status</h1>
<div class="overall" style="background: {bg}; color: {fg};">{_PAGE_HEADLINE[overall]}</div>
{"".join(rows)}
<div class="footer">
<p>Last updated: {html.escape(page["timestamp"])}</p>
<p><a href="/api/test">Run Full Test Suite</a><a href="/api/health">Health Check</a></p>
</div>
</div>
</body>
</html>
"""


def render_html(report: HealthReport, title: str) -> str:
    """HTML report grouped by category, in run order."""
    bg, fg = _COLORS[report.overall_status]
    sections = []
    for category, summary in report.categories.items():
        rows = []
        for o in report.outcomes:
            if o.category != category:
                continue
            error = f'<div class="error">↳ {html.escape(o.error)}</div>' if o.error else ""
            rows.append(
                f'<div class="check"><div><span class="{o.status.value}">●</span> '
                f"{html.escape(o.name)}{error}</div>"
                f'<div class="time">{o.duration_ms}ms</div></div>'
            )
        sections.append(
            f'<div class="section-title">{html.escape(category)} '
            f"({summary.passed}/{summary.total})</div>" + "".join(rows)
        )

    cleanup = ""
    if report.cleanup is not None and report.cleanup.error:
        cleanup = f'<p class="skipped">Cleanup skipped: {html.escape(report.cleanup.error)}</p>'

    return f"""<!DOCTYPE html>
<html lang="sv">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{html.escape(title)}</title>
<style>{_STYLE}</style>
</head>
<body>
<div class="container">
<h1>{html.escape(title)}</h1>
<div class="overall" style="background: {bg}; color: {fg};">{_HEADLINE[report.overall_status]}</div>
<p>{report.passed} passed · {report.failed} failed · {report.skipped} skipped · {report.duration_ms}ms</p>
{"".join(sections)}
{cleanup}
<div class="footer">
<p>Checked at {report.started_at.strftime("%Y-%m-%d %H:%M:%S")} UTC</p>
<p><a href="/api/status">Status Page</a><a href="/api/test">Full Test Suite</a><a href="/api/health">Health Check</a></p>
</div>
</div>
</body>
</html>
"""
