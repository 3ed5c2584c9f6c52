"""
ledger_kernel.domain.entries -- FinancialEntry value object and template rules.

ZERO I/O.  The DTO is a frozen dataclass; the ORM model in
``ledger_kernel.models.financial_entry`` converts to and from it.

A template and its materialized instances are related only through the
``parent_entry_id`` identifier.  Templates never hold a collection of
their children.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from ledger_kernel.exceptions import (
    InvalidTemplateError,
    MissingRecurrencePatternError,
    RecurrenceEndBeforeStartError,
)


class RecurrencePattern(str, Enum):
    """Cadence governing which dates a template is due on."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    SEMIANNUALLY = "SEMIANNUALLY"
    YEARLY = "YEARLY"


@dataclass(frozen=True)
class FinancialEntry:
    """Immutable snapshot of a financial entry.

    ``amount`` is signed: positive is income, negative is expense.
    ``id`` is None until the entry has been persisted.
    """

    owner_id: str
    amount: Decimal
    entry_date: date
    description: str
    tag_id: str | None = None
    is_recurring: bool = False
    recurrence_pattern: RecurrencePattern | None = None
    recurrence_end_date: date | None = None
    parent_entry_id: UUID | None = None
    id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_template(self) -> bool:
        return self.is_recurring and self.parent_entry_id is None

    @property
    def is_instance(self) -> bool:
        return not self.is_recurring and self.parent_entry_id is not None

    @property
    def is_income(self) -> bool:
        return self.amount > 0

    @property
    def is_expense(self) -> bool:
        return self.amount < 0


def validate_template(entry: FinancialEntry) -> None:
    """Check that ``entry`` has the shape of a recurring template.

    Raises:
        InvalidTemplateError: If the entry is not recurring or is itself
            a materialized instance.
        MissingRecurrencePatternError: If no recurrence pattern is set.
        RecurrenceEndBeforeStartError: If the end date precedes entry_date.
    """
    entry_id = str(entry.id)

    if not entry.is_recurring:
        raise InvalidTemplateError(entry_id, "entry is not marked recurring")

    if entry.parent_entry_id is not None:
        raise InvalidTemplateError(
            entry_id, f"entry is an instance of template {entry.parent_entry_id}"
        )

    if entry.recurrence_pattern is None:
        raise MissingRecurrencePatternError(entry_id)

    if (
        entry.recurrence_end_date is not None
        and entry.recurrence_end_date < entry.entry_date
    ):
        raise RecurrenceEndBeforeStartError(
            entry_id,
            entry.entry_date.isoformat(),
            entry.recurrence_end_date.isoformat(),
        )
