"""
Tests for ledger_kernel.services.entry_store.

Validates SqlEntryStore: candidate lookup delegation, plain inserts with
server timestamps, and translation of the (parent_entry_id, entry_date)
unique violation into DuplicateInstanceError without poisoning the
surrounding transaction.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from ledger_kernel.domain.entries import FinancialEntry
from ledger_kernel.exceptions import DuplicateInstanceError
from ledger_kernel.selectors.entry_selector import EntrySelector
from ledger_kernel.services.entry_store import EntryStore, SqlEntryStore
from tests.factories import TEST_OWNER_ID


@pytest.fixture
def store(session):
    return SqlEntryStore(session)


def _instance_of(template: FinancialEntry, entry_date: date) -> FinancialEntry:
    return FinancialEntry(
        owner_id=template.owner_id,
        amount=template.amount,
        entry_date=entry_date,
        description=template.description,
        parent_entry_id=template.id,
    )


class TestSqlEntryStore:
    def test_satisfies_protocol(self, store):
        assert isinstance(store, EntryStore)

    def test_find_templates_due_uses_candidate_predicate(self, store, create_template, create_instance):
        due = create_template(entry_date=date(2024, 1, 15))
        done = create_template(entry_date=date(2024, 1, 15), description="Gym")
        create_instance(done, date(2024, 2, 15))

        assert [t.id for t in store.find_templates_due(date(2024, 2, 15))] == [due.id]

    def test_insert_assigns_id_and_timestamps(self, store):
        entry = FinancialEntry(
            owner_id=TEST_OWNER_ID,
            amount=Decimal("1500.00"),
            entry_date=date(2024, 1, 31),
            description="Salary",
        )

        saved = store.insert(entry)

        assert saved.id is not None
        assert saved.created_at is not None
        assert saved.amount == Decimal("1500.00")
        assert saved.is_income

    def test_insert_instance(self, store, session, create_template):
        template = create_template()

        saved = store.insert(_instance_of(template, date(2024, 2, 15)))

        assert saved.parent_entry_id == template.id
        assert saved.is_instance
        assert EntrySelector(session).list_instances(template.id) == (saved,)

    def test_duplicate_instance_raises_typed_error(self, store, create_template):
        template = create_template()
        store.insert(_instance_of(template, date(2024, 2, 15)))

        with pytest.raises(DuplicateInstanceError) as exc_info:
            store.insert(_instance_of(template, date(2024, 2, 15)))

        assert exc_info.value.code == "DUPLICATE_INSTANCE"
        assert exc_info.value.template_id == str(template.id)
        assert exc_info.value.entry_date == "2024-02-15"

    def test_duplicate_does_not_poison_transaction(self, store, session, create_template):
        template = create_template()
        store.insert(_instance_of(template, date(2024, 2, 15)))

        with pytest.raises(DuplicateInstanceError):
            store.insert(_instance_of(template, date(2024, 2, 15)))

        store.insert(_instance_of(template, date(2024, 3, 15)))
        dates = [i.entry_date for i in EntrySelector(session).list_instances(template.id)]
        assert dates == [date(2024, 2, 15), date(2024, 3, 15)]

    def test_other_integrity_errors_propagate(self, store, create_template):
        template = create_template()
        bad = replace(
            _instance_of(template, date(2024, 2, 15)),
            recurrence_end_date=date(2024, 3, 1),
        )

        with pytest.raises(IntegrityError):
            store.insert(bad)

    def test_unparented_entries_on_same_date_allowed(self, store):
        entry = FinancialEntry(
            owner_id=TEST_OWNER_ID,
            amount=Decimal("-4.50"),
            entry_date=date(2024, 1, 2),
            description="Coffee",
        )

        first = store.insert(entry)
        second = store.insert(entry)

        assert first.id != second.id
