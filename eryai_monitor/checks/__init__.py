"""Check engine — definitions, probe runner, orchestrator, aggregator."""

from .aggregator import DEFAULT_CRITICAL_SERVICES, aggregate, overall_status, summarize
from .models import (
    CategorySummary,
    Check,
    CheckError,
    CheckOutcome,
    CleanupResult,
    HealthReport,
    MissingContextError,
    OutcomeStatus,
    OverallStatus,
    RunContext,
    RunMode,
    check_that,
)
from .orchestrator import Orchestrator
from .runner import execute
