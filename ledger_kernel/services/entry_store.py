"""
EntryStore -- persistence contract consumed by the recurrence engine.

Contract:
    ``find_templates_due(as_of)`` returns the candidate templates for a date
    (the CandidateSelector predicate).  ``insert(entry)`` persists a new
    row and returns it with its id assigned.

Architecture: ledger_kernel/services.  ``SqlEntryStore`` is the SQLAlchemy
    implementation; the recurrence engine depends only on the protocol.

Invariants enforced:
    - insert() is a plain INSERT, never an upsert.
    - A unique-constraint violation on (parent_entry_id, entry_date) is
      reported as DuplicateInstanceError.  The insert runs in its own
      SAVEPOINT so the violation does not poison the caller's transaction.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ledger_kernel.domain.entries import FinancialEntry
from ledger_kernel.exceptions import DuplicateInstanceError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.financial_entry import FinancialEntryModel
from ledger_kernel.selectors.entry_selector import CandidateSelector
from ledger_kernel.services.base import BaseService

logger = get_logger("services.entry_store")


@runtime_checkable
class EntryStore(Protocol):
    """Storage operations the recurrence engine needs."""

    def find_templates_due(self, as_of: date) -> tuple[FinancialEntry, ...]:
        """Templates that are candidates for materialization on ``as_of``."""
        ...

    def insert(self, entry: FinancialEntry) -> FinancialEntry:
        """Persist a new entry and return it with ``id`` assigned."""
        ...


class SqlEntryStore(BaseService[FinancialEntryModel]):
    """SQLAlchemy-backed EntryStore."""

    def __init__(self, session: Session, selector: CandidateSelector | None = None):
        super().__init__(session)
        self._selector = selector or CandidateSelector(session)

    def find_templates_due(self, as_of: date) -> tuple[FinancialEntry, ...]:
        return self._selector.select_candidates(as_of)

    def insert(self, entry: FinancialEntry) -> FinancialEntry:
        """Persist ``entry`` as a new row.

        Raises:
            DuplicateInstanceError: If ``entry`` is an instance and its
                template already has an instance for ``entry.entry_date``.
            IntegrityError: For any other constraint violation.
        """
        model = FinancialEntryModel.from_dto(entry)
        try:
            with self.session.begin_nested():
                self.session.add(model)
                self.session.flush()
        except IntegrityError as exc:
            if entry.parent_entry_id is not None and _is_parent_date_violation(exc):
                raise DuplicateInstanceError(
                    str(entry.parent_entry_id), entry.entry_date.isoformat(),
                ) from exc
            raise

        # Pick up server defaults (created_at / updated_at)
        self.session.refresh(model)

        logger.debug(
            "financial_entry_inserted",
            extra={
                "entry_id": str(model.id),
                "parent_entry_id": (
                    str(model.parent_entry_id) if model.parent_entry_id else None
                ),
                "entry_date": model.entry_date.isoformat(),
            },
        )
        return model.to_dto()


def _is_parent_date_violation(exc: IntegrityError) -> bool:
    """Recognize the (parent_entry_id, entry_date) uniqueness violation.

    PostgreSQL reports the constraint name; SQLite reports the column list.
    """
    message = str(exc.orig)
    return (
        "uq_financial_entries_parent_date" in message
        or "financial_entries.parent_entry_id, financial_entries.entry_date" in message
    )
