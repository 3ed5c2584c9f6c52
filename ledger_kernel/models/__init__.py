"""
ledger_kernel.models -- ORM models.

Architecture: ledger_kernel/models. Imports from ledger_kernel.db.base only.
"""

from ledger_kernel.models.financial_entry import FinancialEntryModel

__all__ = [
    "FinancialEntryModel",
]
