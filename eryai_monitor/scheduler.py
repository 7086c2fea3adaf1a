"""Daily scheduler — runs the full test suite once a day while serving.

Uses a simple asyncio loop instead of a cron dependency. Each run is an
ordinary orchestrator call, so failing runs email the operator.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from eryai_monitor.catalog import ServiceCatalog
from eryai_monitor.checks.models import HealthReport
from eryai_monitor.checks.orchestrator import Orchestrator
from eryai_monitor.suites import Services, Suite, build_checks

logger = logging.getLogger(__name__)


def seconds_until(hour: int, now: datetime | None = None) -> float:
    """Seconds from ``now`` until the next ``hour``:00 UTC."""
    now = now or datetime.now(timezone.utc)
    target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class DailyTestScheduler:
    """Schedules the full test suite at a fixed UTC hour."""

    def __init__(
        self,
        orchestrator: Orchestrator,
        services: Services,
        catalog: ServiceCatalog,
        hour: int = 6,
        on_report: Callable[[HealthReport], Any] | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.services = services
        self.catalog = catalog
        self.hour = hour
        self.on_report = on_report
        self._task: asyncio.Task[None] | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop(), name="daily-test-suite")
        logger.info("Daily test scheduler started (runs at %02d:00 UTC)", self.hour)

    async def stop(self) -> None:
        self._running = False
        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
        logger.info("Daily test scheduler stopped")

    async def run_now(self) -> HealthReport:
        """Run the full suite immediately."""
        checks = build_checks(Suite.FULL, self.services, self.catalog)
        report = await self.orchestrator.run_all(Suite.FULL.mode, checks, notify=True)
        if self.on_report:
            try:
                self.on_report(report)
            except Exception:
                logger.exception("Report callback error")
        return report

    async def _loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(seconds_until(self.hour))
                if not self._running:
                    break
                report = await self.run_now()
                logger.info("Daily test run: %s", report.overall_status.value)
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Daily test run error")
                await asyncio.sleep(60)
