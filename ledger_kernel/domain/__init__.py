"""
ledger_kernel.domain -- Pure value objects and time abstraction.

ZERO I/O (SystemClock aside).
"""

from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.entries import (
    FinancialEntry,
    RecurrencePattern,
    validate_template,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "FinancialEntry",
    "RecurrencePattern",
    "SystemClock",
    "validate_template",
]
