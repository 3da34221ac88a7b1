"""Unit tests for environment-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from schema_guard.config import load_settings
from schema_guard.core.exceptions import ConfigurationError
from schema_guard.utils.env import load_env_file, parse_bool, parse_csv

_VARS = [
  "SCHEMA_GUARD_ENV",
  "SCHEMA_GUARD_DEBUG",
  "SCHEMA_GUARD_DSN",
  "SCHEMA_GUARD_DB_SCHEMA",
  "SCHEMA_GUARD_EXCLUDE_TABLES",
  "SCHEMA_GUARD_ORDERS_TABLE",
  "SCHEMA_GUARD_FAILURE_DELAY_SECONDS",
  "SCHEMA_GUARD_TERMINATE_ON_FAILURE",
  "SCHEMA_GUARD_LOG_DIR",
  "SCHEMA_GUARD_LOG_MAX_BYTES",
  "SCHEMA_GUARD_LOG_BACKUP_COUNT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
  # setenv first so teardown also removes values written by load_env_file.
  for name in _VARS:
    monkeypatch.setenv(name, "")
    monkeypatch.delenv(name)


def test_defaults() -> None:
  settings = load_settings()
  assert settings.environment == "development"
  assert settings.dsn is None
  assert settings.exclude_tables == ("alembic_version", "tags")
  assert settings.orders_table == "orders"
  assert settings.failure_delay_seconds == 60.0
  assert settings.terminate_on_failure is False


def test_test_environment_terminates_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setenv("SCHEMA_GUARD_ENV", "TEST")
  settings = load_settings()
  assert settings.is_test is True
  assert settings.terminate_on_failure is True

  monkeypatch.setenv("SCHEMA_GUARD_TERMINATE_ON_FAILURE", "false")
  assert load_settings().terminate_on_failure is False


def test_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setenv("SCHEMA_GUARD_DSN", " postgresql://app@db/shop ")
  monkeypatch.setenv("SCHEMA_GUARD_EXCLUDE_TABLES", "alembic_version, spatial_ref_sys,")
  monkeypatch.setenv("SCHEMA_GUARD_FAILURE_DELAY_SECONDS", "0")
  monkeypatch.setenv("SCHEMA_GUARD_ORDERS_TABLE", "purchases")
  settings = load_settings()
  assert settings.dsn == "postgresql://app@db/shop"
  assert settings.exclude_tables == ("alembic_version", "spatial_ref_sys")
  assert settings.failure_delay_seconds == 0.0
  assert settings.orders_table == "purchases"


def test_empty_exclude_list_disables_exclusion(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setenv("SCHEMA_GUARD_EXCLUDE_TABLES", "")
  assert load_settings().exclude_tables == ()


@pytest.mark.parametrize(("name", "value"), [("SCHEMA_GUARD_FAILURE_DELAY_SECONDS", "soon"), ("SCHEMA_GUARD_FAILURE_DELAY_SECONDS", "-1"), ("SCHEMA_GUARD_LOG_MAX_BYTES", "0"), ("SCHEMA_GUARD_LOG_BACKUP_COUNT", "x")])
def test_invalid_numbers_raise(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
  monkeypatch.setenv(name, value)
  with pytest.raises(ConfigurationError, match=name):
    load_settings()


def test_load_env_file_respects_existing_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
  env_file = tmp_path / ".env"
  env_file.write_text('# comment\nexport SCHEMA_GUARD_DSN="mysql://app@db/shop"\nSCHEMA_GUARD_ORDERS_TABLE=orders\nnot a pair\n', encoding="utf-8")
  monkeypatch.setenv("SCHEMA_GUARD_ORDERS_TABLE", "purchases")

  assert load_env_file(env_file) == 1
  settings = load_settings()
  assert settings.dsn == "mysql://app@db/shop"
  assert settings.orders_table == "purchases"


def test_missing_env_file_is_ignored(tmp_path: Path) -> None:
  assert load_env_file(tmp_path / "absent.env") == 0


def test_parse_helpers() -> None:
  assert parse_bool("Yes") is True
  assert parse_bool("off") is False
  assert parse_bool(None, default=True) is True
  assert parse_csv(" a, ,b ") == ("a", "b")
