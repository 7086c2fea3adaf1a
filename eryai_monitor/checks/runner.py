"""Probe runner — executes one check with a deadline and never raises.

Every failure mode (assertion, network error, data-store error, timeout)
is converted into a ``CheckOutcome``. Optional checks that fail are
recorded as skipped instead of failed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from .models import Check, CheckOutcome, OutcomeStatus, RunContext

logger = logging.getLogger(__name__)

TIMEOUT_ERROR = "Timeout"


def _elapsed_ms(t0: float) -> int:
    return int(round((time.perf_counter() - t0) * 1000))


def _error_message(exc: BaseException) -> str:
    msg = str(exc)
    return msg if msg else type(exc).__name__


def _failure(
    check: Check, error: str, duration_ms: int, details: Mapping[str, Any] | None = None,
) -> CheckOutcome:
    status = OutcomeStatus.FAILED if check.required else OutcomeStatus.SKIPPED
    return CheckOutcome(
        category=check.category, name=check.name,
        status=status, duration_ms=duration_ms, error=error,
        details=MappingProxyType(dict(details or {})),
    )


class _InnerTimeout(Exception):
    """A TimeoutError raised by the check itself, not by the deadline."""


async def _guarded(check: Check, ctx: RunContext) -> Mapping[str, Any] | None:
    try:
        return await check.probe(ctx)
    except (asyncio.TimeoutError, TimeoutError) as exc:
        raise _InnerTimeout(_error_message(exc)) from exc


async def execute(check: Check, context: RunContext | None = None) -> CheckOutcome:
    """Run ``check.probe`` against ``context`` within ``check.timeout``.

    ``context`` is the shared run context in sequential mode; parallel
    callers pass nothing and get a throwaway context.
    """
    ctx = context if context is not None else RunContext()
    t0 = time.perf_counter()
    try:
        # wait_for cancels the probe task at the deadline; httpx and the
        # data-store client release their connections on cancellation.
        details = await asyncio.wait_for(_guarded(check, ctx), timeout=check.timeout)
    except asyncio.TimeoutError:
        duration = _elapsed_ms(t0)
        logger.warning("Check %s/%s timed out after %.1fs", check.category, check.name, check.timeout)
        return _failure(check, TIMEOUT_ERROR, duration)
    except Exception as exc:
        duration = _elapsed_ms(t0)
        logger.info("Check %s/%s failed: %s", check.category, check.name, _error_message(exc))
        return _failure(check, _error_message(exc), duration, getattr(exc, "details", None))

    duration = _elapsed_ms(t0)
    logger.debug("Check %s/%s passed (%dms)", check.category, check.name, duration)
    return CheckOutcome(
        category=check.category, name=check.name,
        status=OutcomeStatus.PASSED, duration_ms=duration,
        details=MappingProxyType(dict(details or {})),
    )
