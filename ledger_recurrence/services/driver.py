"""
RecurrenceDriver -- one batch pass of the recurring-entry job.

Contract:
    ``run_once(as_of)`` fetches the candidate templates for ``as_of``,
    evaluates each one, materializes those that are due, and returns a
    ``RecurrenceRunResult``.  It never raises: every failure is logged and
    reflected in the result.

Architecture: ledger_recurrence/services.  Uses ledger_recurrence.domain
    for pure evaluation, EntryMaterializer for writes, and the kernel's
    EntryStore for candidate selection.

Invariants enforced:
    - SAVEPOINT isolation per candidate: one failing template rolls back
      only its own work and never aborts the batch.
    - Idempotency: the existence of a same-date child row is the only
      "already done" marker; the driver keeps no cursor or checkpoint.
    - All timestamps come from the injected Clock.
    - Stop signal is honored between candidates; unprocessed candidates are
      picked up again by the next run.

Non-goals:
    - Does NOT call ``session.commit()`` -- the caller (scheduler tick or
      CLI) controls the outer transaction.
    - Does NOT manage background threads -- that is the scheduler's job.
"""

from __future__ import annotations

import time
from datetime import date
from typing import Callable
from uuid import uuid4

from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.entries import FinancialEntry
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.services.entry_store import EntryStore, SqlEntryStore

from ledger_recurrence.domain.recurrence import should_materialize
from ledger_recurrence.domain.types import (
    CandidateOutcome,
    CandidateResult,
    RecurrenceRunResult,
    RecurrenceRunStatus,
)
from ledger_recurrence.services.materializer import EntryMaterializer

logger = get_logger("recurrence.driver")


class RecurrenceDriver:
    """Evaluates and materializes recurring templates for one date."""

    def __init__(
        self,
        session: Session,
        store: EntryStore | None = None,
        materializer: EntryMaterializer | None = None,
        clock: Clock | None = None,
    ):
        self._session = session
        self._store = store or SqlEntryStore(session)
        self._materializer = materializer or EntryMaterializer(self._store)
        self._clock = clock or SystemClock()

    def run_once(
        self,
        as_of: date | None = None,
        should_stop: Callable[[], bool] | None = None,
    ) -> RecurrenceRunResult:
        """Run a single pass for ``as_of`` (defaults to the clock's date)."""
        run_date = as_of or self._clock.today()
        run_id = uuid4()
        started_at = self._clock.now()
        start_time = time.monotonic()

        with LogContext.bind(run_id=str(run_id)):
            logger.info(
                "recurrence_run_started",
                extra={"as_of": run_date.isoformat()},
            )

            try:
                candidates = self._store.find_templates_due(run_date)
            except Exception as exc:
                logger.exception(
                    "recurrence_candidate_query_failed",
                    extra={"as_of": run_date.isoformat()},
                )
                return RecurrenceRunResult(
                    run_id=run_id,
                    as_of=run_date,
                    status=RecurrenceRunStatus.FAILED,
                    started_at=started_at,
                    completed_at=self._clock.now(),
                    duration_ms=int((time.monotonic() - start_time) * 1000),
                    error_summary=f"candidate query failed: {exc}",
                )

            if not candidates:
                logger.debug(
                    "recurrence_no_candidates",
                    extra={"as_of": run_date.isoformat()},
                )
                return RecurrenceRunResult(
                    run_id=run_id,
                    as_of=run_date,
                    status=RecurrenceRunStatus.COMPLETED,
                    started_at=started_at,
                    completed_at=self._clock.now(),
                    duration_ms=int((time.monotonic() - start_time) * 1000),
                )

            logger.info(
                "recurrence_candidates_found",
                extra={"as_of": run_date.isoformat(), "count": len(candidates)},
            )

            attempted = 0
            succeeded = 0
            failed = 0
            skipped = 0
            cancelled = False
            item_results: list[CandidateResult] = []

            for template in candidates:
                if should_stop is not None and should_stop():
                    cancelled = True
                    logger.info(
                        "recurrence_run_interrupted",
                        extra={"processed": len(item_results), "total": len(candidates)},
                    )
                    break

                result = self._process_candidate(template, run_date)
                item_results.append(result)

                if result.outcome == CandidateOutcome.NOT_DUE:
                    skipped += 1
                    continue

                attempted += 1
                if result.outcome == CandidateOutcome.MATERIALIZED:
                    succeeded += 1
                else:
                    failed += 1

            if cancelled:
                status = RecurrenceRunStatus.CANCELLED
            elif failed == 0:
                status = RecurrenceRunStatus.COMPLETED
            elif succeeded == 0:
                status = RecurrenceRunStatus.FAILED
            else:
                status = RecurrenceRunStatus.PARTIALLY_COMPLETED

            duration_ms = int((time.monotonic() - start_time) * 1000)

            logger.info(
                "recurrence_run_completed",
                extra={
                    "as_of": run_date.isoformat(),
                    "status": status.value,
                    "candidates": len(candidates),
                    "attempted": attempted,
                    "succeeded": succeeded,
                    "failed": failed,
                    "skipped": skipped,
                    "duration_ms": duration_ms,
                },
            )

            return RecurrenceRunResult(
                run_id=run_id,
                as_of=run_date,
                status=status,
                candidates=len(candidates),
                attempted=attempted,
                succeeded=succeeded,
                failed=failed,
                skipped=skipped,
                item_results=tuple(item_results),
                started_at=started_at,
                completed_at=self._clock.now(),
                duration_ms=duration_ms,
                error_summary=f"{failed} template(s) failed" if failed else None,
            )

    def _process_candidate(self, template: FinancialEntry, as_of: date) -> CandidateResult:
        """Evaluate and, if due, materialize one template inside a SAVEPOINT."""
        item_start = time.monotonic()

        with LogContext.bind(template_id=str(template.id), owner_id=template.owner_id):
            savepoint = self._session.begin_nested()
            try:
                if not should_materialize(template, as_of):
                    savepoint.rollback()
                    return CandidateResult(
                        template_id=template.id,
                        outcome=CandidateOutcome.NOT_DUE,
                        duration_ms=int((time.monotonic() - item_start) * 1000),
                    )

                instance = self._materializer.materialize(template, as_of)
                savepoint.commit()
                return CandidateResult(
                    template_id=template.id,
                    outcome=CandidateOutcome.MATERIALIZED,
                    instance_id=instance.id,
                    duration_ms=int((time.monotonic() - item_start) * 1000),
                )

            except Exception as exc:
                if savepoint.is_active:
                    savepoint.rollback()
                logger.exception(
                    "recurring_entry_failed",
                    extra={
                        "template_id": str(template.id),
                        "as_of": as_of.isoformat(),
                    },
                )
                return CandidateResult(
                    template_id=template.id,
                    outcome=CandidateOutcome.FAILED,
                    error_code=getattr(exc, "code", "UNHANDLED_EXCEPTION"),
                    error_message=str(exc),
                    duration_ms=int((time.monotonic() - item_start) * 1000),
                )
