"""Operator alerts — one email per run that has failing checks.

Fires when:
- the report contains at least one failed check, and
- an email sender is configured.

Missing configuration silently disables alerts. A failed send is logged
and never affects the run. There is no deduplication across runs: every
failing run sends a fresh alert.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from eryai_monitor.checks.models import HealthReport
from eryai_monitor.config import settings

if TYPE_CHECKING:
    from eryai_monitor.clients import EmailSender

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FailedCheck:
    category: str
    name: str
    error: str


@dataclass(frozen=True)
class AlertPayload:
    failed_count: int
    total_count: int
    duration_ms: int
    timestamp: str
    failures: list[FailedCheck] = field(default_factory=list)

    @property
    def subject(self) -> str:
        return f"🚨 [TEST] EryAI System Alert: {self.failed_count} test(s) failed"


def build_payload(report: HealthReport) -> AlertPayload:
    """Collect the failures of ``report`` verbatim, in run order."""
    return AlertPayload(
        failed_count=report.failed,
        total_count=report.total,
        duration_ms=report.duration_ms,
        timestamp=report.ended_at.strftime("%Y-%m-%d %H:%M:%S UTC"),
        failures=[
            FailedCheck(category=o.category, name=o.name, error=o.error or "")
            for o in report.failures
        ],
    )


def render_text(payload: AlertPayload) -> str:
    lines = [
        f"{payload.failed_count} of {payload.total_count} tests failed "
        f"({payload.duration_ms}ms, {payload.timestamp})",
        "",
    ]
    for f in payload.failures:
        lines.append(f"❌ [{f.category}] {f.name}")
        lines.append(f"   Error: {f.error}")
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def render_html(payload: AlertPayload, base_url: str = "") -> str:
    base = (base_url or settings.monitor_base_url).rstrip("/")
    items = "".join(
        f'<li style="margin-bottom: 10px;"><strong>[{html.escape(f.category)}] '
        f"{html.escape(f.name)}</strong><br>"
        f'<span style="color: #dc2626;">Error: {html.escape(f.error)}</span></li>'
        for f in payload.failures
    )
    return (
        '<div style="font-family: -apple-system, sans-serif; max-width: 600px;">'
        '<h2 style="color: #dc2626;">🚨 EryAI System Alert</h2>'
        f"<p><strong>{payload.failed_count}</strong> of {payload.total_count} tests failed "
        f"at {html.escape(payload.timestamp)} (took {payload.duration_ms}ms).</p>"
        f"<ul>{items}</ul>"
        f'<p><a href="{base}/api/test">Run Tests Again</a> · '
        f'<a href="{base}/api/health">Health Check</a></p>'
        '<p style="color: #6b7280; font-size: 12px;">EryAI Monitoring System</p>'
        "</div>"
    )


class AlertNotifier:
    """Sends the failure report email for a run."""

    def __init__(
        self,
        sender: EmailSender | None = None,
        from_addr: str = "",
        to_addr: str = "",
        base_url: str = "",
    ) -> None:
        self.sender = sender
        self.from_addr = from_addr or settings.alert_from
        self.to_addr = to_addr or settings.superadmin_email
        self.base_url = base_url or settings.monitor_base_url

    @property
    def is_enabled(self) -> bool:
        if self.sender is None or not self.to_addr:
            return False
        return bool(getattr(self.sender, "is_configured", True))

    def status(self) -> dict[str, object]:
        return {"enabled": self.is_enabled, "to": self.to_addr if self.is_enabled else ""}

    async def maybe_notify(self, report: HealthReport) -> bool:
        """Send one alert if ``report`` has failures. Returns True if sent."""
        if report.failed == 0:
            return False
        if not self.is_enabled:
            logger.debug("Alert skipped: no email sender configured")
            return False

        payload = build_payload(report)
        try:
            await self.sender.send(  # type: ignore[union-attr]
                self.from_addr,
                self.to_addr,
                payload.subject,
                render_html(payload, self.base_url),
                render_text(payload),
            )
        except Exception as exc:
            logger.warning("Failure report could not be sent: %s", exc)
            return False

        logger.info("Failure report sent to %s (%d failures)", self.to_addr, payload.failed_count)
        return True
