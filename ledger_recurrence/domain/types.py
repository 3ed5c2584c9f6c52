"""
ledger_recurrence.domain.types -- Pure frozen dataclasses for recurrence runs.

ZERO I/O.  Frozen dataclasses with enum status fields and tuples for
immutable collections.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from uuid import UUID


# =============================================================================
# Status enums
# =============================================================================


class RecurrenceRunStatus(str, Enum):
    """Run-level outcome of one recurrence pass."""

    COMPLETED = "completed"  # No candidate failed
    PARTIALLY_COMPLETED = "partially_completed"  # Some failed, some succeeded
    FAILED = "failed"  # Candidate query failed, or every attempt failed
    CANCELLED = "cancelled"  # Stopped between candidates


class CandidateOutcome(str, Enum):
    """Per-template outcome within a run."""

    MATERIALIZED = "materialized"  # Instance created for the run date
    NOT_DUE = "not_due"  # Cadence does not fall on the run date
    FAILED = "failed"  # Evaluation or materialization raised


# =============================================================================
# Result DTOs
# =============================================================================


@dataclass(frozen=True)
class CandidateResult:
    """Immutable result of processing one candidate template."""

    template_id: UUID | None
    outcome: CandidateOutcome
    instance_id: UUID | None = None
    error_code: str | None = None
    error_message: str | None = None
    duration_ms: int = 0


@dataclass(frozen=True)
class RecurrenceRunResult:
    """Summary of one ``run_once`` pass.

    ``attempted`` counts candidates that were due (materialization was
    tried) plus candidates whose evaluation itself raised; ``skipped``
    counts candidates whose cadence did not fall on ``as_of``.
    """

    run_id: UUID
    as_of: date
    status: RecurrenceRunStatus
    candidates: int = 0
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    item_results: tuple[CandidateResult, ...] = ()
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0
    error_summary: str | None = None

    def summary(self) -> dict[str, int]:
        """The counters operators care about."""
        return {
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
        }
