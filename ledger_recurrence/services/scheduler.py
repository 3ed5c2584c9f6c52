"""
RecurrenceScheduler -- In-process periodic trigger for the recurrence job.

Contract:
    On every tick, opens a fresh session, runs ``RecurrenceDriver.run_once``
    for the clock's current date, and commits.  ``start()`` / ``stop()``
    make the ticker's lifecycle explicit: start at process init, stop at
    shutdown.

Invariants enforced:
    - All dates derive from the injected Clock (in the configured zone).
    - A failing tick is logged and swallowed; the loop keeps running so
      future ticks still happen.
    - Graceful shutdown: the stop signal is checked between candidates, so
      a stop never leaves a half-processed template behind.

Non-goals:
    - NOT a distributed scheduler (no leader election).  Concurrent runners
      against one database rely on the storage unique constraint.
"""

from __future__ import annotations

import threading
from datetime import tzinfo
from typing import Callable

from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.logging_config import get_logger

from ledger_recurrence.domain.types import RecurrenceRunResult
from ledger_recurrence.services.driver import RecurrenceDriver

logger = get_logger("recurrence.scheduler")


class RecurrenceScheduler:
    """Background ticker that runs the recurrence driver periodically.

    Contract:
        - ``tick()`` runs one pass now (public for testing and manual runs).
        - ``start()`` / ``stop()`` for background thread operation.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        driver_factory: Callable[[Session], RecurrenceDriver],
        clock: Clock | None = None,
        tick_interval_seconds: int = 60,
        timezone: tzinfo | None = None,
    ):
        if tick_interval_seconds <= 0:
            raise ValueError(
                f"tick_interval_seconds must be positive, got {tick_interval_seconds}"
            )
        self._session_factory = session_factory
        self._driver_factory = driver_factory
        self._clock = clock or SystemClock()
        self._tick_interval = tick_interval_seconds
        self._timezone = timezone
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def tick(self) -> RecurrenceRunResult | None:
        """Run one recurrence pass for today.

        Returns the run result, or None if the tick itself failed (for
        example the database was unreachable).
        """
        as_of = self._clock.today(self._timezone)
        session = self._session_factory()
        try:
            driver = self._driver_factory(session)
            result = driver.run_once(as_of, should_stop=self._stop_event.is_set)
            session.commit()
            return result
        except Exception:
            session.rollback()
            logger.exception(
                "recurrence_tick_failed",
                extra={"as_of": as_of.isoformat()},
            )
            return None
        finally:
            session.close()

    def start(self) -> None:
        """Start the scheduler in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="recurrence-scheduler",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            "recurrence_scheduler_started",
            extra={"tick_interval": self._tick_interval},
        )

    def stop(self, timeout: float = 30.0) -> None:
        """Signal stop and wait for the current tick to finish.

        Args:
            timeout: Max seconds to wait for the thread to finish.
        """
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        logger.info("recurrence_scheduler_stopped")

    def wait(self) -> None:
        """Block until the scheduler thread exits."""
        while self.is_running:
            self._thread.join(timeout=1.0)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def tick_interval(self) -> int:
        return self._tick_interval

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _run_loop(self) -> None:
        """Background polling loop. Exits when stop_event is set."""
        while not self._stop_event.is_set():
            self.tick()
            self._stop_event.wait(timeout=self._tick_interval)
