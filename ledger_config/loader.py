"""
Settings loader (``ledger_config.loader``).

Responsibility
--------------
Reads the YAML layers and the ``LEDGER_*`` environment variables and
merges them into one flat mapping of raw values.  Parsing and validation
of those values lives in ``ledger_config.settings``.

Failure modes
-------------
* Missing override file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Top-level YAML that is not a mapping  -> ``ValueError``.
* Unknown keys in any layer  -> ``ValueError``.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

CONFIG_FILE_ENV = "LEDGER_CONFIG_FILE"

ENV_KEYS: dict[str, str] = {
    "LEDGER_DATABASE_URL": "database_url",
    "LEDGER_TICK_INTERVAL_SECONDS": "tick_interval_seconds",
    "LEDGER_TIMEZONE": "timezone",
    "LEDGER_LOG_LEVEL": "log_level",
    "LEDGER_ECHO_SQL": "echo_sql",
}

KNOWN_KEYS = frozenset(ENV_KEYS.values())


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    An empty file yields an empty dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"{path}: expected a mapping at the top level, got {type(data).__name__}"
        )
    _reject_unknown_keys(data, source=str(path))
    return data


def env_overrides(env: Mapping[str, str]) -> dict[str, str]:
    """Raw values from ``LEDGER_*`` variables present in ``env``."""
    return {key: env[var] for var, key in ENV_KEYS.items() if var in env}


def load_raw_settings(
    path: Path | None,
    env: Mapping[str, str],
) -> dict[str, Any]:
    """Merge defaults, the optional override file and ``env`` (in that order)."""
    raw = load_yaml_file(DEFAULTS_PATH)

    override_path = path
    if override_path is None and env.get(CONFIG_FILE_ENV):
        override_path = Path(env[CONFIG_FILE_ENV])
    if override_path is not None:
        raw.update(load_yaml_file(Path(override_path)))

    raw.update(env_overrides(env))
    return raw


def _reject_unknown_keys(data: Mapping[str, Any], source: str) -> None:
    unknown = sorted(set(data) - KNOWN_KEYS)
    if unknown:
        raise ValueError(
            f"{source}: unknown setting(s) {', '.join(unknown)}; "
            f"expected a subset of {', '.join(sorted(KNOWN_KEYS))}"
        )
