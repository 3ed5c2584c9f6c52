"""
ledger_config -- single public entrypoint for runtime settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()``.  No other component reads configuration
    files or ``LEDGER_*`` environment variables directly.

Architecture position:
    Configuration.  Sits beside ``ledger_kernel``; the kernel never imports
    from ``ledger_config``.  The CLI is the one place that reads settings
    and hands plain values (URL, interval, zone) to the kernel and engine.

Sources, lowest to highest precedence:
    1. packaged ``defaults.yaml``
    2. optional YAML file (``path`` argument or ``LEDGER_CONFIG_FILE``)
    3. ``LEDGER_*`` environment variables

Failure modes:
    - ``FileNotFoundError`` -- override file does not exist.
    - ``ValueError`` -- unknown keys or invalid values.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from ledger_config.loader import load_raw_settings
from ledger_config.settings import RecurrenceSettings

_logger = logging.getLogger("ledger_kernel.config")


def get_active_settings(
    path: Path | str | None = None,
    env: Mapping[str, str] | None = None,
) -> RecurrenceSettings:
    """The ONLY public settings entrypoint.

    Args:
        path: Optional YAML override file.  Defaults to ``LEDGER_CONFIG_FILE``
            when that variable is set.
        env: Environment mapping.  Defaults to ``os.environ``.

    Raises:
        FileNotFoundError: If the override file is missing.
        ValueError: If a setting is unknown or invalid.
    """
    environ = os.environ if env is None else env
    raw = load_raw_settings(Path(path) if path is not None else None, environ)
    settings = RecurrenceSettings.from_raw(raw)

    _logger.debug(
        "settings_loaded",
        extra={
            "tick_interval": settings.tick_interval_seconds,
            "timezone": settings.timezone,
            "log_level": settings.log_level,
        },
    )
    return settings


__all__ = ["RecurrenceSettings", "get_active_settings"]
