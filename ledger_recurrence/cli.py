"""
Command-line entry point for the recurrence engine.

Usage:
    ledger-recurrence run [--as-of YYYY-MM-DD] [--config PATH]
    ledger-recurrence serve [--config PATH]
    ledger-recurrence preview --template-id ID [--days N] [--from YYYY-MM-DD]
    ledger-recurrence init-db [--config PATH]

Examples:
    # Materialize everything due today, then exit
    ledger-recurrence run

    # Backfill a specific day
    ledger-recurrence run --as-of 2024-02-15

    # Run the background ticker until SIGINT / SIGTERM
    ledger-recurrence serve

    # Show the next 90 days of due dates for one template (no writes)
    ledger-recurrence preview --template-id 0b6f... --days 90

Settings come from ``ledger_config.get_active_settings()``: packaged
defaults, then the ``--config`` file (or ``LEDGER_CONFIG_FILE``), then
``LEDGER_*`` environment variables.
"""

from __future__ import annotations

import argparse
import signal
import sys
from datetime import date, timedelta
from pathlib import Path
from uuid import UUID

from ledger_config import RecurrenceSettings, get_active_settings
from ledger_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
    session_scope,
)
from ledger_kernel.domain.clock import SystemClock
from ledger_kernel.exceptions import EntryNotFoundError
from ledger_kernel.logging_config import configure_logging, get_logger
from ledger_kernel.selectors.entry_selector import EntrySelector

from ledger_recurrence.domain.recurrence import occurrences_between
from ledger_recurrence.domain.types import RecurrenceRunStatus
from ledger_recurrence.orchestrator import RecurrenceOrchestrator

logger = get_logger("recurrence.cli")

DEFAULT_PREVIEW_DAYS = 90


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledger-recurrence",
        description="Materialize recurring financial entries.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML settings file (default: LEDGER_CONFIG_FILE or packaged defaults).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run the recurrence job once and exit.")
    run.add_argument(
        "--as-of",
        type=_iso_date,
        default=None,
        help="Evaluation date (YYYY-MM-DD). Default: today in the configured timezone.",
    )

    sub.add_parser("serve", help="Run the recurrence job on a timer until interrupted.")

    preview = sub.add_parser("preview", help="List upcoming due dates for one template.")
    preview.add_argument("--template-id", required=True, type=UUID, help="Template entry id.")
    preview.add_argument(
        "--days",
        type=int,
        default=DEFAULT_PREVIEW_DAYS,
        help=f"Window length in days (default: {DEFAULT_PREVIEW_DAYS}).",
    )
    preview.add_argument(
        "--from",
        dest="start",
        type=_iso_date,
        default=None,
        help="Window start (YYYY-MM-DD). Default: today.",
    )

    sub.add_parser("init-db", help="Create the database tables.")
    return parser


def _init(settings: RecurrenceSettings) -> None:
    configure_logging(level=settings.log_level)
    init_engine_from_url(settings.database_url, echo=settings.echo_sql)


def _cmd_run(settings: RecurrenceSettings, as_of: date | None) -> int:
    clock = SystemClock()
    run_date = as_of or clock.today(settings.tzinfo)

    with session_scope() as session:
        result = RecurrenceOrchestrator.from_session(session, clock=clock).run_once(run_date)

    print(
        f"{result.as_of.isoformat()}: {result.status.value} "
        f"(attempted={result.attempted} succeeded={result.succeeded} "
        f"failed={result.failed} skipped={result.skipped})"
    )
    if result.error_summary:
        print(f"  {result.error_summary}", file=sys.stderr)
    return 0 if result.status == RecurrenceRunStatus.COMPLETED else 1


def _cmd_serve(settings: RecurrenceSettings) -> int:
    orchestrator = RecurrenceOrchestrator(clock=SystemClock())
    scheduler = orchestrator.create_scheduler(
        get_session_factory(),
        tick_interval_seconds=settings.tick_interval_seconds,
        timezone=settings.tzinfo,
    )

    def _shutdown(signum, frame):
        logger.info("shutdown_signal_received", extra={"signal": signum})
        scheduler.stop()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    scheduler.start()
    scheduler.wait()
    return 0


def _cmd_preview(
    settings: RecurrenceSettings,
    template_id: UUID,
    start: date | None,
    days: int,
) -> int:
    if days <= 0:
        print(f"ERROR: --days must be positive, got {days}", file=sys.stderr)
        return 2

    window_start = start or SystemClock().today(settings.tzinfo)
    window_end = window_start + timedelta(days=days - 1)

    with session_scope() as session:
        try:
            template = EntrySelector(session).get(template_id)
        except EntryNotFoundError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    if not template.is_template:
        print(f"ERROR: Entry {template_id} is not a recurring template", file=sys.stderr)
        return 1

    due = occurrences_between(template, window_start, window_end)
    print(
        f"{template.description} ({template.recurrence_pattern.value}, "
        f"{template.amount}) {window_start.isoformat()}..{window_end.isoformat()}:"
    )
    for day in due:
        print(f"  {day.isoformat()}")
    if not due:
        print("  (no due dates)")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = get_active_settings(path=args.config)
    except (FileNotFoundError, ValueError) as exc:
        print(f"ERROR: Failed to load settings: {exc}", file=sys.stderr)
        return 2

    _init(settings)

    if args.command == "init-db":
        create_tables()
        print("Tables created.")
        return 0
    if args.command == "run":
        return _cmd_run(settings, args.as_of)
    if args.command == "serve":
        return _cmd_serve(settings)
    if args.command == "preview":
        return _cmd_preview(settings, args.template_id, args.start, args.days)

    raise AssertionError(f"unhandled command {args.command!r}")


if __name__ == "__main__":
    sys.exit(main())
