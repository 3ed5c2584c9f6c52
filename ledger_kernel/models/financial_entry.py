"""
ORM model for financial entries (templates, instances and ordinary entries).

Contract:
    FinancialEntryModel persists one row per entry and round-trips with the
    ``FinancialEntry`` DTO through ``to_dto()`` / ``from_dto()``.

Architecture: ledger_kernel/models.  Imports from ledger_kernel.db.base and
    ledger_kernel.domain only.

Invariants enforced:
    - UNIQUE (parent_entry_id, entry_date): at most one materialized instance
      per template per date.  Rows with a NULL parent (templates and
      ordinary entries) are not constrained.
    - CHECK: a recurring row has no parent and has a pattern.
    - CHECK: a row with a parent is not recurring and carries no pattern or
      end date.
    - CHECK: recurrence_pattern, when present, is one of the RecurrencePattern
      values, so every stored row decodes in to_dto().
    - CHECK: recurrence_end_date, when present, is not before entry_date.
    - parent_entry_id is a plain identifier.  There is deliberately no
      relationship() between parent and child rows.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    Index,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TimestampedBase, UUIDString
from ledger_kernel.domain.entries import FinancialEntry, RecurrencePattern


class FinancialEntryModel(TimestampedBase):
    """Persistent financial entry row."""

    __tablename__ = "financial_entries"

    __table_args__ = (
        UniqueConstraint(
            "parent_entry_id", "entry_date",
            name="uq_financial_entries_parent_date",
        ),
        CheckConstraint(
            "NOT is_recurring OR "
            "(parent_entry_id IS NULL AND recurrence_pattern IS NOT NULL)",
            name="ck_financial_entries_template_shape",
        ),
        CheckConstraint(
            "parent_entry_id IS NULL OR "
            "(NOT is_recurring AND recurrence_pattern IS NULL "
            "AND recurrence_end_date IS NULL)",
            name="ck_financial_entries_instance_shape",
        ),
        CheckConstraint(
            "recurrence_pattern IS NULL OR recurrence_pattern IN ("
            + ", ".join(f"'{p.value}'" for p in RecurrencePattern)
            + ")",
            name="ck_financial_entries_known_pattern",
        ),
        CheckConstraint(
            "recurrence_end_date IS NULL OR recurrence_end_date >= entry_date",
            name="ck_financial_entries_end_after_start",
        ),
        Index("ix_financial_entries_is_recurring", "is_recurring"),
        Index("ix_financial_entries_parent", "parent_entry_id"),
        Index("ix_financial_entries_owner_date", "owner_id", "entry_date"),
    )

    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    tag_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_recurring: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False,
    )
    recurrence_pattern: Mapped[str | None] = mapped_column(
        String(20), nullable=True,
    )
    recurrence_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    parent_entry_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<FinancialEntryModel {self.id} {self.entry_date} "
            f"{self.amount} recurring={self.is_recurring}>"
        )

    def to_dto(self) -> FinancialEntry:
        return FinancialEntry(
            id=self.id,
            owner_id=self.owner_id,
            amount=self.amount,
            entry_date=self.entry_date,
            description=self.description,
            tag_id=self.tag_id,
            is_recurring=self.is_recurring,
            recurrence_pattern=(
                RecurrencePattern(self.recurrence_pattern)
                if self.recurrence_pattern
                else None
            ),
            recurrence_end_date=self.recurrence_end_date,
            parent_entry_id=self.parent_entry_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_dto(cls, dto: FinancialEntry) -> FinancialEntryModel:
        model = cls(
            owner_id=dto.owner_id,
            amount=dto.amount,
            entry_date=dto.entry_date,
            description=dto.description,
            tag_id=dto.tag_id,
            is_recurring=dto.is_recurring,
            recurrence_pattern=(
                dto.recurrence_pattern.value if dto.recurrence_pattern else None
            ),
            recurrence_end_date=dto.recurrence_end_date,
            parent_entry_id=dto.parent_entry_id,
        )
        if dto.id is not None:
            model.id = dto.id
        return model
