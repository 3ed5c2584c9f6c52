"""
ledger_recurrence -- Recurring financial entry materialization engine.

Given templates (entries marked recurring), a periodic job decides on each
run whether a concrete dated instance must exist for the current date and
creates it exactly once.

Architecture:
    ledger_recurrence/ is a top-level package on top of ledger_kernel.
    Nothing in ledger_kernel imports from ledger_recurrence.

    domain/       pure cadence rules and frozen result DTOs (ZERO I/O)
    services/     materializer, single-pass driver, background scheduler
    orchestrator  wiring of the above from a session or session factory
    cli           command-line entry point
"""
