"""Recurrence engine services: materializer, driver and scheduler."""

from ledger_recurrence.services.driver import RecurrenceDriver
from ledger_recurrence.services.materializer import EntryMaterializer, build_instance
from ledger_recurrence.services.scheduler import RecurrenceScheduler

__all__ = [
    "EntryMaterializer",
    "RecurrenceDriver",
    "RecurrenceScheduler",
    "build_instance",
]
