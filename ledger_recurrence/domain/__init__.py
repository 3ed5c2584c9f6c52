"""
ledger_recurrence.domain -- Pure recurrence rules and run-result types.

ZERO I/O.  All types are frozen dataclasses.
"""

from ledger_recurrence.domain.recurrence import (
    months_between,
    next_occurrence,
    occurrences_between,
    should_materialize,
)
from ledger_recurrence.domain.types import (
    CandidateOutcome,
    CandidateResult,
    RecurrenceRunResult,
    RecurrenceRunStatus,
)

__all__ = [
    "CandidateOutcome",
    "CandidateResult",
    "RecurrenceRunResult",
    "RecurrenceRunStatus",
    "months_between",
    "next_occurrence",
    "occurrences_between",
    "should_materialize",
]
