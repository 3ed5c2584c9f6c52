"""
EntryMaterializer -- creates one concrete entry from a recurring template.

Contract:
    ``build_instance(template, as_of)`` is pure and returns the unsaved
    instance DTO.  ``materialize(template, as_of)`` validates the template,
    builds the instance and persists it through ``EntryStore.insert``.

Non-goals:
    - Does NOT decide whether the template is due (see should_materialize).
    - Does NOT prevent duplicates itself: the candidate query filters
      already-materialized templates and the storage unique constraint is
      the final guard.
"""

from __future__ import annotations

from datetime import date

from ledger_kernel.domain.entries import FinancialEntry, validate_template
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.services.entry_store import EntryStore

logger = get_logger("recurrence.materializer")


def build_instance(template: FinancialEntry, as_of: date) -> FinancialEntry:
    """Unsaved instance of ``template`` dated ``as_of``."""
    return FinancialEntry(
        owner_id=template.owner_id,
        amount=template.amount,
        entry_date=as_of,
        description=template.description,
        tag_id=template.tag_id,
        is_recurring=False,
        recurrence_pattern=None,
        recurrence_end_date=None,
        parent_entry_id=template.id,
    )


class EntryMaterializer:
    """Persists materialized instances through an EntryStore."""

    def __init__(self, store: EntryStore):
        self._store = store

    def materialize(self, template: FinancialEntry, as_of: date) -> FinancialEntry:
        """Create and persist the instance of ``template`` for ``as_of``.

        Raises:
            TemplateError: If ``template`` is not a well-formed template.
            DuplicateInstanceError: If the instance already exists.
        """
        validate_template(template)

        instance = self._store.insert(build_instance(template, as_of))

        with LogContext.bind(entry_id=instance.id):
            logger.info(
                "recurring_entry_materialized",
                extra={
                    "template_id": str(template.id),
                    "entry_date": as_of,
                    "amount": instance.amount,
                },
            )
        return instance
