"""
RecurrenceSettings -- typed, validated runtime settings.

Every value arriving from YAML or the environment is parsed here, so the
rest of the code only ever sees a frozen ``RecurrenceSettings``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timezone as dt_timezone
from datetime import tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off"})

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class RecurrenceSettings:
    """Runtime settings for the recurrence engine."""

    database_url: str
    tick_interval_seconds: int = 60
    timezone: str = "UTC"
    log_level: str = "INFO"
    echo_sql: bool = False

    @property
    def tzinfo(self) -> tzinfo:
        """Zone used to derive the evaluation date from the clock."""
        return _resolve_timezone(self.timezone)

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> RecurrenceSettings:
        """Parse and validate a merged mapping of raw values.

        Raises:
            ValueError: If a value is missing or invalid.
        """
        database_url = raw.get("database_url")
        if not isinstance(database_url, str) or not database_url.strip():
            raise ValueError("database_url must be a non-empty string")

        timezone_name = str(raw.get("timezone", "UTC"))
        _resolve_timezone(timezone_name)

        return cls(
            database_url=database_url.strip(),
            tick_interval_seconds=_parse_interval(raw.get("tick_interval_seconds", 60)),
            timezone=timezone_name,
            log_level=_parse_log_level(raw.get("log_level", "INFO")),
            echo_sql=_parse_bool("echo_sql", raw.get("echo_sql", False)),
        )


def _resolve_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return dt_timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {name!r}") from exc


def _parse_interval(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"tick_interval_seconds must be an integer, got {value!r}")
    try:
        interval = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"tick_interval_seconds must be an integer, got {value!r}"
        ) from exc
    if interval <= 0:
        raise ValueError(f"tick_interval_seconds must be positive, got {interval}")
    return interval


def _parse_log_level(value: Any) -> str:
    level = str(value).strip().upper()
    if level not in _LOG_LEVELS:
        raise ValueError(
            f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {value!r}"
        )
    return level


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")
