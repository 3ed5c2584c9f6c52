"""
Pure recurrence rule evaluation.

Contract:
    ``should_materialize(template, as_of)`` decides whether ``template``
    must produce an instance dated ``as_of``.  It is PURE -- no I/O, no
    clock access -- and is correct on its own, independently of the
    candidate query that usually precedes it.

Architecture: ledger_recurrence/domain.  ZERO I/O.

Rules (days = whole days since the template's entry_date):
    DAILY         every date
    WEEKLY        days % 7 == 0
    BIWEEKLY      days % 14 == 0
    MONTHLY       same day of month
    QUARTERLY     whole months % 3 == 0 and same day of month
    SEMIANNUALLY  whole months % 6 == 0 and same day of month
    YEARLY        same month and day, or Feb 28 of a non-leap year for a
                  Feb 29 anchor

    The seed date (as_of == entry_date) is always due.  An anchor day that
    the evaluated month lacks (the 31st in April, the 30th in February) is
    simply not due that month: there is no clamping to month end.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta

from ledger_kernel.domain.entries import FinancialEntry, RecurrencePattern
from ledger_kernel.exceptions import MissingRecurrencePatternError

# Longest gap between two due dates is a YEARLY or SEMIANNUALLY anchor
# that only fits once a year (<= 366 days).
_SCAN_HORIZON_DAYS = 400


def months_between(start: date, end: date) -> int:
    """Whole months elapsed from ``start`` to ``end`` (``end >= start``)."""
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return months


def _is_leap_day_fallback(anchor: date, as_of: date) -> bool:
    return (
        anchor.month == 2
        and anchor.day == 29
        and as_of.month == 2
        and as_of.day == 28
        and not calendar.isleap(as_of.year)
    )


def should_materialize(template: FinancialEntry, as_of: date) -> bool:
    """Decide whether ``template`` is due on ``as_of``.

    Raises:
        MissingRecurrencePatternError: If the template has no pattern.
    """
    start = template.entry_date
    pattern = template.recurrence_pattern

    if as_of < start:
        return False

    if as_of == start:
        return True

    if pattern is None:
        raise MissingRecurrencePatternError(str(template.id))

    days_since_start = (as_of - start).days
    same_day_of_month = as_of.day == start.day

    if pattern == RecurrencePattern.DAILY:
        return True

    if pattern == RecurrencePattern.WEEKLY:
        return days_since_start % 7 == 0

    if pattern == RecurrencePattern.BIWEEKLY:
        return days_since_start % 14 == 0

    if pattern == RecurrencePattern.MONTHLY:
        return same_day_of_month

    if pattern == RecurrencePattern.QUARTERLY:
        return same_day_of_month and months_between(start, as_of) % 3 == 0

    if pattern == RecurrencePattern.SEMIANNUALLY:
        return same_day_of_month and months_between(start, as_of) % 6 == 0

    if pattern == RecurrencePattern.YEARLY:
        same_month_and_day = as_of.month == start.month and same_day_of_month
        return same_month_and_day or _is_leap_day_fallback(start, as_of)

    raise ValueError(f"Unsupported recurrence pattern: {pattern!r}")


def _within_end_date(template: FinancialEntry, day: date) -> bool:
    end = template.recurrence_end_date
    return end is None or day <= end


def next_occurrence(template: FinancialEntry, after: date) -> date | None:
    """First due date strictly after ``after``.

    Returns None when the recurrence end date is reached first.
    """
    candidate = max(after + timedelta(days=1), template.entry_date)

    for _ in range(_SCAN_HORIZON_DAYS):
        if not _within_end_date(template, candidate):
            return None
        if should_materialize(template, candidate):
            return candidate
        candidate += timedelta(days=1)

    return None


def occurrences_between(
    template: FinancialEntry,
    start: date,
    end: date,
) -> tuple[date, ...]:
    """Every due date in the inclusive window [start, end].

    Respects the template's own start date and recurrence end date.

    Raises:
        ValueError: If ``end`` precedes ``start``.
    """
    if end < start:
        raise ValueError(f"Window end {end} precedes start {start}")

    day = max(start, template.entry_date)
    if template.recurrence_end_date is not None:
        end = min(end, template.recurrence_end_date)

    due: list[date] = []
    while day <= end:
        if should_materialize(template, day):
            due.append(day)
        day += timedelta(days=1)
    return tuple(due)
