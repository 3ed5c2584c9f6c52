"""Selectors for the ledger kernel (read side)."""

from ledger_kernel.selectors.entry_selector import CandidateSelector, EntrySelector

__all__ = [
    "CandidateSelector",
    "EntrySelector",
]
