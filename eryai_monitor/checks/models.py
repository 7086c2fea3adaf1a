"""Check definitions, run context and run results.

A ``Check`` is an immutable definition: metadata plus an async probe.
Running a batch of checks produces one ``CheckOutcome`` per check, which
the aggregator folds into a ``HealthReport``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

DEFAULT_TIMEOUT = 10.0


# ── Enums ────────────────────────────────────────────────────────────────────


class RunMode(str, Enum):
    PARALLEL = "parallel"
    SEQUENTIAL = "sequential"


class OutcomeStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class OverallStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"
    CRITICAL = "critical"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    OverallStatus.OK: 0,
    OverallStatus.DEGRADED: 1,
    OverallStatus.CRITICAL: 2,
}


# ── Errors ───────────────────────────────────────────────────────────────────


class CheckError(Exception):
    """Raised by a probe when the thing it verifies is not as expected.

    ``details`` is copied onto the failed outcome, e.g. the URL and HTTP
    status code an endpoint answered with.
    """

    def __init__(self, message: str, details: Mapping[str, Any] | None = None) -> None:
        self.details = dict(details or {})
        super().__init__(message)


class MissingContextError(CheckError):
    """Raised when a probe reads a run-context key no earlier check wrote."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"No {key} in run context (set by an earlier check)")


def check_that(condition: Any, message: str) -> None:
    """Fail the current probe with ``message`` unless ``condition`` holds."""
    if not condition:
        raise CheckError(message)


# ── Run context ──────────────────────────────────────────────────────────────


class RunContext:
    """Scratch space shared by the checks of one sequential run.

    Values written by one check are visible to the checks scheduled after
    it. A fresh context is created for every run (and for every check of a
    parallel run), so nothing leaks between runs.
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def require(self, key: str) -> Any:
        """Return the value for ``key`` or fail the probe descriptively."""
        value = self._values.get(key)
        if value is None:
            raise MissingContextError(key)
        return value

    def pop(self, key: str) -> Any:
        return self._values.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._values and self._values[key] is not None

    def __len__(self) -> int:
        return len(self._values)


# A probe may return details to record on its outcome, or None
Probe = Callable[[RunContext], Awaitable[Mapping[str, Any] | None]]


# ── Check definition ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Check:
    """A named unit of verification."""

    name: str
    category: str
    probe: Probe = field(repr=False, compare=False)
    required: bool = True
    timeout: float = DEFAULT_TIMEOUT


# ── Results ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CheckOutcome:
    """Result of executing one check."""

    category: str
    name: str
    status: OutcomeStatus
    duration_ms: int
    error: str | None = None
    details: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "category": self.category,
            "name": self.name,
            "status": self.status.value,
        }
        if self.error is not None:
            data["error"] = self.error
        data["durationMs"] = self.duration_ms
        return data


@dataclass(frozen=True)
class CategorySummary:
    passed: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.skipped

    def to_dict(self) -> dict[str, int]:
        return {"passed": self.passed, "failed": self.failed, "skipped": self.skipped}


@dataclass(frozen=True)
class CleanupResult:
    """Informational record of the post-run cleanup step."""

    status: OutcomeStatus
    removed: bool = False
    error: str | None = None


@dataclass(frozen=True)
class HealthReport:
    """Immutable snapshot of one run."""

    started_at: datetime
    ended_at: datetime
    duration_ms: int
    overall_status: OverallStatus
    outcomes: tuple[CheckOutcome, ...]
    categories: Mapping[str, CategorySummary]
    cleanup: CleanupResult | None = None

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def passed(self) -> int:
        return sum(c.passed for c in self.categories.values())

    @property
    def failed(self) -> int:
        return sum(c.failed for c in self.categories.values())

    @property
    def skipped(self) -> int:
        return sum(c.skipped for c in self.categories.values())

    @property
    def failures(self) -> list[CheckOutcome]:
        return [o for o in self.outcomes if o.status == OutcomeStatus.FAILED]

    def to_dict(self) -> dict[str, Any]:
        """Flat record consumed by JSON clients. Field names are fixed."""
        return {
            "status": self.overall_status.value,
            "timestamp": self.started_at.isoformat(),
            "durationMs": self.duration_ms,
            "categories": {name: s.to_dict() for name, s in self.categories.items()},
            "checks": [o.to_dict() for o in self.outcomes],
        }
