"""Best-effort removal of rows created by a sequential test run."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .models import CleanupResult, OutcomeStatus, RunContext

if TYPE_CHECKING:
    from ..clients import DataStore

logger = logging.getLogger(__name__)

SESSION_KEY = "session_id"

# (table, column holding the session id), children before parents
SESSION_TABLES: tuple[tuple[str, str], ...] = (
    ("chat_messages", "session_id"),
    ("notifications", "session_id"),
    ("chat_sessions", "id"),
)


async def cleanup(context: RunContext, store: DataStore | None) -> CleanupResult:
    """Delete everything keyed to the run's test session.

    Never raises. Safe to call twice or with an empty context: once the
    session key has been consumed there is nothing left to do.
    """
    session_id = context.get(SESSION_KEY)
    if not session_id:
        return CleanupResult(status=OutcomeStatus.SKIPPED)
    if store is None:
        logger.info("Cleanup skipped for session %s: no data store configured", session_id)
        return CleanupResult(status=OutcomeStatus.SKIPPED, error="No data store configured")

    try:
        for table, column in SESSION_TABLES:
            await store.delete(table, {column: session_id})
    except Exception as exc:
        logger.warning("Cleanup of test session %s failed: %s", session_id, exc)
        return CleanupResult(status=OutcomeStatus.SKIPPED, error=str(exc) or type(exc).__name__)

    context.pop(SESSION_KEY)
    logger.info("Removed test data for session %s", session_id)
    return CleanupResult(status=OutcomeStatus.PASSED, removed=True)
