"""
Pytest fixtures for the recurrence engine test suite.

Provides:
- In-memory SQLite engine/session fixtures (fresh database per test)
- DeterministicClock
- Template and instance factories
- Structured-log capture

Every engine comes from ``ledger_kernel.db.engine.build_engine`` so tests
exercise the same SAVEPOINT setup as local SQLite runs.  The in-memory
database is a single shared connection (StaticPool): never keep two
sessions with open transactions at the same time.
"""

import json
import logging
from datetime import date
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session, sessionmaker

import ledger_kernel.models  # noqa: F401  (populates Base.metadata)
from ledger_kernel.db.base import Base
from ledger_kernel.db.engine import build_engine
from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.domain.entries import FinancialEntry
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from tests.factories import insert_instance, insert_template


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, driver):
            driver.run_once(date(2024, 2, 15))
            logs = captured_logs()
            assert any(r["message"] == "recurrence_run_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    eng = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def session(session_factory) -> Generator[Session, None, None]:
    sess = session_factory()
    yield sess
    sess.rollback()
    sess.close()


# =============================================================================
# Clock fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock()


# =============================================================================
# Entry factories
# =============================================================================


@pytest.fixture
def create_template(session: Session):
    """Factory fixture to persist templates in the test session."""

    def _create(**kwargs) -> FinancialEntry:
        return insert_template(session, **kwargs)

    return _create


@pytest.fixture
def create_instance(session: Session):
    """Factory fixture to persist instances in the test session."""

    def _create(template: FinancialEntry, entry_date: date) -> FinancialEntry:
        return insert_instance(session, template, entry_date)

    return _create
