"""
RecurrenceOrchestrator -- DI container for the recurrence engine.

Contract:
    Wires the entry store, materializer and driver around one session,
    and builds a RecurrenceScheduler around a session factory.  Single
    place where all recurrence dependencies are composed.

Architecture: ledger_recurrence (top-level).  This is the canonical entry
    point for running the recurrence job, either once or on a timer.
"""

from __future__ import annotations

from datetime import date, tzinfo
from typing import Callable

from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.entry_store import SqlEntryStore

from ledger_recurrence.domain.types import RecurrenceRunResult
from ledger_recurrence.services.driver import RecurrenceDriver
from ledger_recurrence.services.materializer import EntryMaterializer
from ledger_recurrence.services.scheduler import RecurrenceScheduler

logger = get_logger("recurrence.orchestrator")


class RecurrenceOrchestrator:
    """DI container for the recurrence engine.

    Contract:
        - ``from_session()`` factory creates a fully wired orchestrator.
        - ``create_driver()`` returns a RecurrenceDriver for one pass.
        - ``create_scheduler()`` returns a RecurrenceScheduler for background use.
        - ``run_once()`` runs the job now against the orchestrator's session.

    Non-goals:
        - Does NOT start the scheduler automatically -- caller decides.
        - Does NOT commit the orchestrator's session -- caller decides.
    """

    def __init__(self, session: Session | None = None, clock: Clock | None = None) -> None:
        self._session = session
        self._clock = clock or SystemClock()

    @classmethod
    def from_session(
        cls,
        session: Session,
        clock: Clock | None = None,
    ) -> RecurrenceOrchestrator:
        return cls(session=session, clock=clock)

    def create_driver(self, session: Session | None = None) -> RecurrenceDriver:
        """Create a driver bound to ``session`` (default: the orchestrator's)."""
        target_session = session or self._session
        if target_session is None:
            raise ValueError("No session given and the orchestrator has none")
        store = SqlEntryStore(target_session)
        return RecurrenceDriver(
            session=target_session,
            store=store,
            materializer=EntryMaterializer(store),
            clock=self._clock,
        )

    def create_scheduler(
        self,
        session_factory: Callable[[], Session],
        tick_interval_seconds: int = 60,
        timezone: tzinfo | None = None,
    ) -> RecurrenceScheduler:
        """Create a scheduler that opens a new session per tick."""
        logger.debug(
            "recurrence_scheduler_created",
            extra={"tick_interval": tick_interval_seconds},
        )
        return RecurrenceScheduler(
            session_factory=session_factory,
            driver_factory=self.create_driver,
            clock=self._clock,
            tick_interval_seconds=tick_interval_seconds,
            timezone=timezone,
        )

    def run_once(self, as_of: date | None = None) -> RecurrenceRunResult:
        """Run the recurrence job now (evaluation date defaults to today)."""
        return self.create_driver().run_once(as_of)

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def clock(self) -> Clock:
        return self._clock
