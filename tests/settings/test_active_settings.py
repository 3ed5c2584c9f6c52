"""
Tests for ledger_config.get_active_settings().

Validates layering (packaged defaults, override file, LEDGER_* variables),
value parsing, and rejection of unknown keys and invalid values.
"""

from dataclasses import FrozenInstanceError
from datetime import timezone

import pytest

from ledger_config import RecurrenceSettings, get_active_settings


@pytest.fixture
def write_config(tmp_path):
    def _write(text: str):
        path = tmp_path / "ledger.yaml"
        path.write_text(text)
        return path

    return _write


# =============================================================================
# Layering
# =============================================================================


class TestDefaults:
    def test_packaged_defaults(self):
        settings = get_active_settings(env={})

        assert settings == RecurrenceSettings(
            database_url="sqlite:///ledger.db",
            tick_interval_seconds=60,
            timezone="UTC",
            log_level="INFO",
            echo_sql=False,
        )

    def test_frozen(self):
        settings = get_active_settings(env={})
        with pytest.raises(FrozenInstanceError):
            settings.tick_interval_seconds = 5  # type: ignore[misc]

    def test_utc_tzinfo(self):
        assert get_active_settings(env={}).tzinfo == timezone.utc


class TestOverrideFile:
    def test_file_overrides_defaults(self, write_config):
        path = write_config(
            "database_url: postgresql+psycopg2://ledger@localhost/ledger\n"
            "tick_interval_seconds: 300\n"
        )

        settings = get_active_settings(path=path, env={})

        assert settings.database_url == "postgresql+psycopg2://ledger@localhost/ledger"
        assert settings.tick_interval_seconds == 300
        assert settings.log_level == "INFO"

    def test_file_from_environment_variable(self, write_config):
        path = write_config("log_level: debug\n")

        settings = get_active_settings(env={"LEDGER_CONFIG_FILE": str(path)})

        assert settings.log_level == "DEBUG"

    def test_empty_file_keeps_defaults(self, write_config):
        settings = get_active_settings(path=write_config(""), env={})

        assert settings.tick_interval_seconds == 60

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_settings(path=tmp_path / "nope.yaml", env={})

    def test_unknown_key_rejected(self, write_config):
        path = write_config("tick_interval: 30\n")

        with pytest.raises(ValueError, match="unknown setting"):
            get_active_settings(path=path, env={})

    def test_non_mapping_rejected(self, write_config):
        with pytest.raises(ValueError, match="mapping"):
            get_active_settings(path=write_config("- a\n- b\n"), env={})


class TestEnvironment:
    def test_environment_wins_over_file(self, write_config):
        path = write_config("tick_interval_seconds: 300\n")

        settings = get_active_settings(
            path=path, env={"LEDGER_TICK_INTERVAL_SECONDS": "15"},
        )

        assert settings.tick_interval_seconds == 15

    def test_all_variables(self):
        settings = get_active_settings(env={
            "LEDGER_DATABASE_URL": "sqlite:///:memory:",
            "LEDGER_TICK_INTERVAL_SECONDS": "5",
            "LEDGER_TIMEZONE": "utc",
            "LEDGER_LOG_LEVEL": "warning",
            "LEDGER_ECHO_SQL": "yes",
        })

        assert settings.database_url == "sqlite:///:memory:"
        assert settings.tick_interval_seconds == 5
        assert settings.log_level == "WARNING"
        assert settings.echo_sql is True

    def test_unrelated_variables_ignored(self):
        settings = get_active_settings(env={"LEDGER_SOMETHING_ELSE": "x", "PATH": "/bin"})

        assert settings.tick_interval_seconds == 60


# =============================================================================
# Validation
# =============================================================================


class TestValidation:
    @pytest.mark.parametrize("value", ["0", "-5", "soon", "1.5"])
    def test_invalid_interval(self, value):
        with pytest.raises(ValueError, match="tick_interval_seconds"):
            get_active_settings(env={"LEDGER_TICK_INTERVAL_SECONDS": value})

    def test_boolean_interval_rejected(self, write_config):
        with pytest.raises(ValueError, match="tick_interval_seconds"):
            get_active_settings(path=write_config("tick_interval_seconds: true\n"), env={})

    def test_invalid_log_level(self):
        with pytest.raises(ValueError, match="log_level"):
            get_active_settings(env={"LEDGER_LOG_LEVEL": "LOUD"})

    def test_invalid_boolean(self):
        with pytest.raises(ValueError, match="echo_sql"):
            get_active_settings(env={"LEDGER_ECHO_SQL": "maybe"})

    def test_unknown_timezone(self):
        with pytest.raises(ValueError, match="timezone"):
            get_active_settings(env={"LEDGER_TIMEZONE": "Mars/Olympus_Mons"})

    def test_blank_database_url(self):
        with pytest.raises(ValueError, match="database_url"):
            get_active_settings(env={"LEDGER_DATABASE_URL": "  "})

