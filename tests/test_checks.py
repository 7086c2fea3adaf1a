"""Tests for check models, the probe runner and the aggregator."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from conftest import make_check
from eryai_monitor.checks.aggregator import aggregate, overall_status, summarize
from eryai_monitor.checks.models import (
    CategorySummary,
    Check,
    CheckError,
    CheckOutcome,
    MissingContextError,
    OutcomeStatus,
    OverallStatus,
    RunContext,
    check_that,
)
from eryai_monitor.checks.runner import TIMEOUT_ERROR, execute

T0 = datetime(2025, 1, 1, 6, 0, 0, tzinfo=timezone.utc)


def outcome(name: str, status: OutcomeStatus = OutcomeStatus.PASSED, category: str = "Demo") -> CheckOutcome:
    error = None if status == OutcomeStatus.PASSED else "boom"
    return CheckOutcome(category=category, name=name, status=status, duration_ms=5, error=error)


# ── RunContext ───────────────────────────────────────────────────────────────


class TestRunContext:
    def test_set_and_require(self) -> None:
        ctx = RunContext()
        ctx.set("session_id", "abc")
        assert ctx.require("session_id") == "abc"
        assert "session_id" in ctx

    def test_require_missing_is_descriptive(self) -> None:
        ctx = RunContext()
        with pytest.raises(MissingContextError) as exc:
            ctx.require("session_id")
        assert "session_id" in str(exc.value)
        assert exc.value.key == "session_id"

    def test_none_value_counts_as_missing(self) -> None:
        ctx = RunContext()
        ctx.set("session_id", None)
        assert "session_id" not in ctx
        with pytest.raises(MissingContextError):
            ctx.require("session_id")

    def test_get_default_and_pop(self) -> None:
        ctx = RunContext()
        assert ctx.get("x", "fallback") == "fallback"
        ctx.set("x", 1)
        assert ctx.pop("x") == 1
        assert ctx.pop("x") is None
        assert len(ctx) == 0


class TestCheckThat:
    def test_passes_silently(self) -> None:
        check_that(True, "never raised")

    def test_raises_with_message(self) -> None:
        with pytest.raises(Exception, match="Status: 500"):
            check_that(False, "Status: 500")


# ── Probe runner ─────────────────────────────────────────────────────────────


class TestExecute:
    @pytest.mark.asyncio
    async def test_passing_probe(self) -> None:
        result = await execute(make_check("Page loads"))
        assert result.status == OutcomeStatus.PASSED
        assert result.error is None
        assert result.duration_ms >= 0

    @pytest.mark.asyncio
    async def test_required_failure_is_failed(self) -> None:
        result = await execute(make_check("Page loads", fail="HTTP 500"))
        assert result.status == OutcomeStatus.FAILED
        assert result.error == "HTTP 500"

    @pytest.mark.asyncio
    async def test_optional_failure_is_skipped(self) -> None:
        result = await execute(make_check("Page loads", fail="HTTP 500", required=False))
        assert result.status == OutcomeStatus.SKIPPED
        assert result.error == "HTTP 500"

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_caught(self) -> None:
        async def probe(ctx: RunContext) -> None:
            raise ZeroDivisionError("division by zero")

        result = await execute(Check(name="Broken", category="Demo", probe=probe))
        assert result.status == OutcomeStatus.FAILED
        assert result.error == "division by zero"

    @pytest.mark.asyncio
    async def test_empty_message_uses_exception_name(self) -> None:
        async def probe(ctx: RunContext) -> None:
            raise RuntimeError()

        result = await execute(Check(name="Broken", category="Demo", probe=probe))
        assert result.error == "RuntimeError"

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        check = make_check("Slow", delay=5.0, timeout=0.05)
        loop = asyncio.get_running_loop()
        t0 = loop.time()
        result = await execute(check)
        assert loop.time() - t0 < 1.0
        assert result.status == OutcomeStatus.FAILED
        assert result.error == TIMEOUT_ERROR

    @pytest.mark.asyncio
    async def test_optional_timeout_is_skipped(self) -> None:
        result = await execute(make_check("Slow", delay=5.0, timeout=0.05, required=False))
        assert result.status == OutcomeStatus.SKIPPED
        assert result.error == TIMEOUT_ERROR

    @pytest.mark.asyncio
    async def test_timeout_raised_inside_check_keeps_its_message(self) -> None:
        async def probe(ctx: RunContext) -> None:
            raise TimeoutError("upstream gave up after 3 retries")

        result = await execute(Check(name="Retrying", category="Demo", probe=probe, timeout=5.0))
        assert result.status == OutcomeStatus.FAILED
        assert result.error == "upstream gave up after 3 retries"

    @pytest.mark.asyncio
    async def test_bare_timeout_raised_inside_check(self) -> None:
        async def probe(ctx: RunContext) -> None:
            raise asyncio.TimeoutError()

        result = await execute(Check(name="Retrying", category="Demo", probe=probe, timeout=5.0))
        assert result.error == "TimeoutError"

    @pytest.mark.asyncio
    async def test_returned_details_are_recorded(self) -> None:
        async def probe(ctx: RunContext) -> dict:
            return {"url": "https://eryai.tech", "statusCode": 200}

        result = await execute(Check(name="Landing Page", category="Websites", probe=probe))
        assert result.details == {"url": "https://eryai.tech", "statusCode": 200}
        assert "statusCode" not in result.to_dict()

    @pytest.mark.asyncio
    async def test_error_details_are_recorded(self) -> None:
        async def probe(ctx: RunContext) -> None:
            raise CheckError("HTTP 502", details={"statusCode": 502})

        result = await execute(Check(name="Landing Page", category="Websites", probe=probe))
        assert result.error == "HTTP 502"
        assert result.details == {"statusCode": 502}

    @pytest.mark.asyncio
    async def test_writes_to_shared_context(self) -> None:
        async def probe(ctx: RunContext) -> None:
            ctx.set("session_id", "s-1")

        ctx = RunContext()
        await execute(Check(name="Create", category="Demo", probe=probe), ctx)
        assert ctx.get("session_id") == "s-1"

    @pytest.mark.asyncio
    async def test_missing_context_fails_descriptively(self) -> None:
        async def probe(ctx: RunContext) -> None:
            ctx.require("session_id")

        result = await execute(Check(name="Session saved", category="Demo", probe=probe), RunContext())
        assert result.status == OutcomeStatus.FAILED
        assert "session_id" in (result.error or "")


# ── Aggregator ───────────────────────────────────────────────────────────────


class TestOverallStatus:
    def test_all_passed_is_ok(self) -> None:
        assert overall_status([outcome("A"), outcome("B")]) == OverallStatus.OK

    def test_skips_do_not_escalate(self) -> None:
        assert overall_status([outcome("A"), outcome("B", OutcomeStatus.SKIPPED)]) == OverallStatus.OK

    def test_non_critical_failure_is_degraded(self) -> None:
        assert overall_status([outcome("A"), outcome("X", OutcomeStatus.FAILED)]) == OverallStatus.DEGRADED

    def test_critical_failure_is_critical(self) -> None:
        outcomes = [outcome("A"), outcome("Supabase Database", OutcomeStatus.FAILED)]
        assert overall_status(outcomes) == OverallStatus.CRITICAL

    def test_critical_wins_regardless_of_order(self) -> None:
        outcomes = [
            outcome("Supabase Database", OutcomeStatus.FAILED),
            outcome("X", OutcomeStatus.FAILED),
            outcome("A"),
        ]
        assert overall_status(outcomes) == OverallStatus.CRITICAL

    def test_custom_critical_set(self) -> None:
        outcomes = [outcome("Supabase Database", OutcomeStatus.FAILED)]
        assert overall_status(outcomes, critical_services={"Other"}) == OverallStatus.DEGRADED

    def test_lattice_order(self) -> None:
        assert OverallStatus.OK.severity < OverallStatus.DEGRADED.severity < OverallStatus.CRITICAL.severity


class TestSummarize:
    def test_counts_per_category_in_first_seen_order(self) -> None:
        outcomes = [
            outcome("a", category="Landing"),
            outcome("b", OutcomeStatus.FAILED, category="Demo"),
            outcome("c", OutcomeStatus.SKIPPED, category="Landing"),
            outcome("d", category="Demo"),
        ]
        summary = summarize(outcomes)
        assert list(summary) == ["Landing", "Demo"]
        assert summary["Landing"].to_dict() == {"passed": 1, "failed": 0, "skipped": 1}
        assert summary["Demo"].to_dict() == {"passed": 1, "failed": 1, "skipped": 0}

    def test_counts_sum_to_category_size(self) -> None:
        outcomes = [outcome(str(i), OutcomeStatus(s), category="C")
                    for i, s in enumerate(["passed", "failed", "skipped", "failed"])]
        assert summarize(outcomes)["C"].total == 4


class TestAggregate:
    def test_report_fields(self) -> None:
        outcomes = [outcome("A"), outcome("X", OutcomeStatus.FAILED, category="Sales")]
        report = aggregate(outcomes, T0, T0 + timedelta(milliseconds=1500))
        assert report.duration_ms == 1500
        assert report.overall_status == OverallStatus.DEGRADED
        assert report.total == 2
        assert report.passed == 1
        assert report.failed == 1
        assert [o.name for o in report.failures] == ["X"]

    def test_idempotent(self) -> None:
        outcomes = [outcome("A"), outcome("Sofia AI API", OutcomeStatus.FAILED)]
        first = aggregate(outcomes, T0, T0)
        second = aggregate(outcomes, T0, T0)
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_to_dict_shape(self) -> None:
        outcomes = [outcome("A"), outcome("X", OutcomeStatus.FAILED)]
        data = aggregate(outcomes, T0, T0 + timedelta(seconds=1)).to_dict()
        assert set(data) == {"status", "timestamp", "durationMs", "categories", "checks"}
        assert data["status"] == "degraded"
        assert data["timestamp"] == T0.isoformat()
        assert data["categories"] == {"Demo": {"passed": 1, "failed": 1, "skipped": 0}}
        assert data["checks"][0] == {"category": "Demo", "name": "A", "status": "passed", "durationMs": 5}
        assert data["checks"][1]["error"] == "boom"

    def test_empty_batch(self) -> None:
        report = aggregate([], T0, T0)
        assert report.overall_status == OverallStatus.OK
        assert report.categories == {}

    def test_categories_are_read_only(self) -> None:
        report = aggregate([outcome("A")], T0, T0)
        with pytest.raises(TypeError):
            report.categories["Other"] = CategorySummary()  # type: ignore[index]
        assert list(report.categories) == ["Demo"]
