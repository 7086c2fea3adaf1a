"""Orchestrator — runs a batch of checks and produces one HealthReport.

Two disciplines:
- parallel: every check runs concurrently with its own throwaway context
  (read-only liveness probes with no data dependency between them);
- sequential: checks run one at a time in declaration order, sharing a
  single RunContext, so a later check can use what an earlier one created.

A failing check never stops the batch. After the batch the orchestrator
runs cleanup (sequential only), aggregates, then hands the report to the
notifier.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Collection, Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from .aggregator import DEFAULT_CRITICAL_SERVICES, aggregate
from .cleanup import cleanup
from .models import (
    Check,
    CheckOutcome,
    CleanupResult,
    HealthReport,
    OutcomeStatus,
    RunContext,
    RunMode,
)
from .runner import execute

if TYPE_CHECKING:
    from ..clients import DataStore
    from ..notifications import AlertNotifier

logger = logging.getLogger(__name__)


def _internal_failure(check: Check, exc: BaseException) -> CheckOutcome:
    return CheckOutcome(
        category=check.category, name=check.name,
        status=OutcomeStatus.FAILED if check.required else OutcomeStatus.SKIPPED,
        duration_ms=0, error=f"Internal error: {type(exc).__name__}: {exc}",
    )


class Orchestrator:
    """Executes check batches.

    Sequential runs are serialized through a lock: one RunContext is only
    ever owned by one in-flight run. Parallel runs need no lock.
    """

    def __init__(
        self,
        critical_services: Collection[str] = DEFAULT_CRITICAL_SERVICES,
        notifier: AlertNotifier | None = None,
        store: DataStore | None = None,
    ) -> None:
        self.critical_services = frozenset(critical_services)
        self.notifier = notifier
        self.store = store
        self._sequential_lock = asyncio.Lock()

    async def run_all(
        self,
        mode: RunMode | str,
        checks: Sequence[Check],
        notify: bool = True,
    ) -> HealthReport:
        """Run ``checks`` under ``mode`` and return the run's report."""
        mode = RunMode(mode)
        started_at = datetime.now(timezone.utc)
        logger.info("Starting %s run of %d checks", mode.value, len(checks))

        cleanup_result: CleanupResult | None = None
        if mode == RunMode.PARALLEL:
            outcomes = await self._run_parallel(checks)
        else:
            async with self._sequential_lock:
                context = RunContext()
                outcomes = await self._run_sequential(checks, context)
                cleanup_result = await cleanup(context, self.store)

        ended_at = datetime.now(timezone.utc)
        report = aggregate(
            outcomes, started_at, ended_at,
            critical_services=self.critical_services,
            cleanup=cleanup_result,
        )
        logger.info(
            "Run finished: %s (%d passed, %d failed, %d skipped, %dms)",
            report.overall_status.value, report.passed, report.failed,
            report.skipped, report.duration_ms,
        )

        if notify and self.notifier is not None:
            await self.notifier.maybe_notify(report)
        return report

    async def _run_parallel(self, checks: Sequence[Check]) -> list[CheckOutcome]:
        results = await asyncio.gather(
            *(execute(check) for check in checks), return_exceptions=True,
        )
        outcomes: list[CheckOutcome] = []
        for check, result in zip(checks, results):
            if isinstance(result, CheckOutcome):
                outcomes.append(result)
            else:
                logger.error("Runner raised for %s/%s: %r", check.category, check.name, result)
                outcomes.append(_internal_failure(check, result))
        return outcomes

    async def _run_sequential(
        self, checks: Sequence[Check], context: RunContext,
    ) -> list[CheckOutcome]:
        outcomes: list[CheckOutcome] = []
        for check in checks:
            try:
                outcomes.append(await execute(check, context))
            except Exception as exc:
                logger.exception("Runner raised for %s/%s", check.category, check.name)
                outcomes.append(_internal_failure(check, exc))
        return outcomes
