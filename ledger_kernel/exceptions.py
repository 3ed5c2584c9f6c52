"""
Typed exception hierarchy for the ledger kernel.

Every error has a TYPED exception class (catch by type, not message), a
machine-readable ``code`` class attribute, and structured data attributes
that the JSON log formatter copies into ``exc_*`` fields.

    LedgerKernelError (base)
    |
    +-- EntryError
    |   +-- EntryNotFoundError
    |   +-- DuplicateInstanceError
    |
    +-- TemplateError
        +-- InvalidTemplateError
        +-- MissingRecurrencePatternError
        +-- RecurrenceEndBeforeStartError

Recovery guidance:
    - DuplicateInstanceError -> another runner already materialized the
      (template, date) pair; safe to ignore for that tick.
    - TemplateError -> the template row is malformed; fix it through the
      CRUD layer.  The recurrence run counts it as a per-candidate failure.
"""


class LedgerKernelError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_KERNEL_ERROR"


# Entry-related exceptions


class EntryError(LedgerKernelError):
    """Base exception for financial entry persistence errors."""

    code: str = "ENTRY_ERROR"


class EntryNotFoundError(EntryError):
    """Financial entry does not exist."""

    code: str = "ENTRY_NOT_FOUND"

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Financial entry not found: {entry_id}")


class DuplicateInstanceError(EntryError):
    """A materialized instance already exists for the (template, date) pair.

    Raised when the storage-level unique constraint on
    (parent_entry_id, entry_date) rejects an insert.
    """

    code: str = "DUPLICATE_INSTANCE"

    def __init__(self, template_id: str, entry_date: str):
        self.template_id = template_id
        self.entry_date = entry_date
        super().__init__(
            f"Template {template_id} already has an instance dated {entry_date}"
        )


# Template-related exceptions


class TemplateError(LedgerKernelError):
    """Base exception for malformed recurring templates."""

    code: str = "TEMPLATE_ERROR"


class InvalidTemplateError(TemplateError):
    """Entry cannot act as a recurring template."""

    code: str = "INVALID_TEMPLATE"

    def __init__(self, entry_id: str, reason: str):
        self.entry_id = entry_id
        self.reason = reason
        super().__init__(f"Entry {entry_id} is not a valid template: {reason}")


class MissingRecurrencePatternError(TemplateError):
    """Recurring template has no recurrence pattern."""

    code: str = "MISSING_RECURRENCE_PATTERN"

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Recurring entry {entry_id} has no recurrence pattern")


class RecurrenceEndBeforeStartError(TemplateError):
    """Recurrence end date precedes the template's own entry date."""

    code: str = "RECURRENCE_END_BEFORE_START"

    def __init__(self, entry_id: str, entry_date: str, recurrence_end_date: str):
        self.entry_id = entry_id
        self.entry_date = entry_date
        self.recurrence_end_date = recurrence_end_date
        super().__init__(
            f"Recurring entry {entry_id} ends on {recurrence_end_date}, "
            f"before its start date {entry_date}"
        )
