"""Write-side services for the ledger kernel."""

from ledger_kernel.services.entry_store import EntryStore, SqlEntryStore

__all__ = [
    "EntryStore",
    "SqlEntryStore",
]
