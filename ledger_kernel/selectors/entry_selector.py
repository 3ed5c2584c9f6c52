"""
Module: ledger_kernel.selectors.entry_selector
Responsibility: Read-only query access to financial entries, including the
    candidate query that feeds the recurrence engine.
Architecture position: Kernel > Selectors.  May import from models/,
    domain/ and selectors/base.py.

Invariants enforced:
    - Read-only: no mutations performed on any queried data.
    - DTO convention: all public methods return FinancialEntry DTOs.
    - Candidate idempotency filter: the "no instance for this date yet"
      condition is a correlated NOT EXISTS evaluated by the database, never
      a post-filter in Python.

Failure modes:
    - ``get()`` raises EntryNotFoundError; list queries return empty tuples.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, aliased

from ledger_kernel.domain.entries import FinancialEntry
from ledger_kernel.exceptions import EntryNotFoundError
from ledger_kernel.models.financial_entry import FinancialEntryModel
from ledger_kernel.selectors.base import BaseSelector


class EntrySelector(BaseSelector[FinancialEntryModel]):
    """General read queries over financial entries."""

    def __init__(self, session: Session):
        super().__init__(session)

    def get(self, entry_id: UUID) -> FinancialEntry:
        """Return one entry by id.

        Raises:
            EntryNotFoundError: If no entry has that id.
        """
        model = self.session.get(FinancialEntryModel, entry_id)
        if model is None:
            raise EntryNotFoundError(str(entry_id))
        return model.to_dto()

    def list_templates(self, owner_id: str) -> tuple[FinancialEntry, ...]:
        """Recurring templates owned by ``owner_id`` (instances excluded)."""
        models = self.session.execute(
            select(FinancialEntryModel)
            .where(
                FinancialEntryModel.owner_id == owner_id,
                FinancialEntryModel.is_recurring == True,  # noqa: E712
                FinancialEntryModel.parent_entry_id.is_(None),
            )
            .order_by(FinancialEntryModel.entry_date, FinancialEntryModel.id)
        ).scalars().all()
        return tuple(m.to_dto() for m in models)

    def list_instances(self, template_id: UUID) -> tuple[FinancialEntry, ...]:
        """Materialized instances of one template, oldest first."""
        models = self.session.execute(
            select(FinancialEntryModel)
            .where(FinancialEntryModel.parent_entry_id == template_id)
            .order_by(FinancialEntryModel.entry_date)
        ).scalars().all()
        return tuple(m.to_dto() for m in models)


class CandidateSelector(BaseSelector[FinancialEntryModel]):
    """Selects recurring templates that may need an instance on a given date.

    A template is a candidate for ``as_of`` when:
        - it is recurring and has no parent (instances are never candidates);
        - its recurrence end date is absent or not before ``as_of``;
        - its own entry date has arrived (``entry_date <= as_of``);
        - no child row exists with ``entry_date == as_of``.

    Whether the template's cadence actually falls on ``as_of`` is decided
    afterwards by the recurrence evaluator.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def select_candidates(self, as_of: date) -> tuple[FinancialEntry, ...]:
        template = FinancialEntryModel
        child = aliased(FinancialEntryModel)

        already_materialized = (
            select(child.id)
            .where(
                child.parent_entry_id == template.id,
                child.entry_date == as_of,
            )
            .exists()
        )

        models = self.session.execute(
            select(template)
            .where(
                template.is_recurring == True,  # noqa: E712
                template.parent_entry_id.is_(None),
                or_(
                    template.recurrence_end_date.is_(None),
                    template.recurrence_end_date >= as_of,
                ),
                template.entry_date <= as_of,
                ~already_materialized,
            )
            .order_by(template.entry_date.asc(), template.id.asc())
        ).scalars().all()

        return tuple(m.to_dto() for m in models)
