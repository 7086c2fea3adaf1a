"""Aggregator — folds check outcomes into a HealthReport.

Pure functions, no I/O. Running them twice over the same outcomes gives
identical results.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence
from datetime import datetime
from types import MappingProxyType

from .models import (
    CategorySummary,
    CheckOutcome,
    CleanupResult,
    HealthReport,
    OutcomeStatus,
    OverallStatus,
)

DEFAULT_CRITICAL_SERVICES: frozenset[str] = frozenset({
    "Supabase Database",
    "Gemini AI API",
    "Sofia AI API",
})


def summarize(outcomes: Iterable[CheckOutcome]) -> dict[str, CategorySummary]:
    """Per-category passed/failed/skipped counts, in first-seen order."""
    counts: dict[str, dict[str, int]] = {}
    for o in outcomes:
        bucket = counts.setdefault(o.category, {"passed": 0, "failed": 0, "skipped": 0})
        bucket[o.status.value] += 1
    return {cat: CategorySummary(**c) for cat, c in counts.items()}


def overall_status(
    outcomes: Iterable[CheckOutcome],
    critical_services: Collection[str] = DEFAULT_CRITICAL_SERVICES,
) -> OverallStatus:
    """Escalate ok < degraded < critical.

    Any failed check makes the run degraded; a failed check whose name is
    a critical service makes it critical. Skips never escalate.
    """
    status = OverallStatus.OK
    for o in outcomes:
        if o.status != OutcomeStatus.FAILED:
            continue
        if o.name in critical_services:
            return OverallStatus.CRITICAL
        status = OverallStatus.DEGRADED
    return status


def aggregate(
    outcomes: Sequence[CheckOutcome],
    started_at: datetime,
    ended_at: datetime,
    critical_services: Collection[str] = DEFAULT_CRITICAL_SERVICES,
    cleanup: CleanupResult | None = None,
) -> HealthReport:
    """Build the immutable report for one run."""
    duration_ms = int(round((ended_at - started_at).total_seconds() * 1000))
    return HealthReport(
        started_at=started_at,
        ended_at=ended_at,
        duration_ms=max(duration_ms, 0),
        overall_status=overall_status(outcomes, critical_services),
        outcomes=tuple(outcomes),
        categories=MappingProxyType(summarize(outcomes)),
        cleanup=cleanup,
    )
