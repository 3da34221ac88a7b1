"""Verifier configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from schema_guard.core.exceptions import ConfigurationError
from schema_guard.services.order_state_checks import DEFAULT_ORDERS_TABLE
from schema_guard.services.verifier import DEFAULT_EXCLUDED_TABLES
from schema_guard.utils.env import default_env_path, load_env_file, optional_str, parse_bool, parse_csv


@dataclass(frozen=True)
class Settings:
  """Typed settings for schema verification."""

  environment: str
  debug: bool
  dsn: str | None
  db_schema: str | None
  exclude_tables: tuple[str, ...]
  orders_table: str
  failure_delay_seconds: float
  terminate_on_failure: bool
  log_dir: str | None
  log_max_bytes: int
  log_backup_count: int

  @property
  def is_test(self) -> bool:
    return self.environment == "test"


def _parse_int(name: str, default: str, *, minimum: int) -> int:
  raw = os.getenv(name, default)
  try:
    value = int(raw)
  except ValueError as exc:
    raise ConfigurationError(f"{name} must be an integer, got {raw!r}.") from exc

  if value < minimum:
    raise ConfigurationError(f"{name} must be >= {minimum}.")
  return value


def _parse_seconds(name: str, default: str) -> float:
  raw = os.getenv(name, default)
  try:
    value = float(raw)
  except ValueError as exc:
    raise ConfigurationError(f"{name} must be a number of seconds, got {raw!r}.") from exc

  if value < 0:
    raise ConfigurationError(f"{name} must be zero or a positive number.")
  return value


def load_settings() -> Settings:
  """Build settings from the current environment without caching."""

  environment = (os.getenv("SCHEMA_GUARD_ENV") or "development").strip().lower()
  exclude_raw = os.getenv("SCHEMA_GUARD_EXCLUDE_TABLES")
  exclude_tables = parse_csv(exclude_raw) if exclude_raw is not None else tuple(sorted(DEFAULT_EXCLUDED_TABLES))

  orders_table = optional_str(os.getenv("SCHEMA_GUARD_ORDERS_TABLE")) or DEFAULT_ORDERS_TABLE

  # Test runs exit after the alarm delay unless told otherwise.
  terminate_on_failure = parse_bool(os.getenv("SCHEMA_GUARD_TERMINATE_ON_FAILURE"), default=environment == "test")

  return Settings(
    environment=environment,
    debug=parse_bool(os.getenv("SCHEMA_GUARD_DEBUG")),
    dsn=optional_str(os.getenv("SCHEMA_GUARD_DSN")),
    db_schema=optional_str(os.getenv("SCHEMA_GUARD_DB_SCHEMA")),
    exclude_tables=exclude_tables,
    orders_table=orders_table,
    failure_delay_seconds=_parse_seconds("SCHEMA_GUARD_FAILURE_DELAY_SECONDS", "60"),
    terminate_on_failure=terminate_on_failure,
    log_dir=optional_str(os.getenv("SCHEMA_GUARD_LOG_DIR")),
    log_max_bytes=_parse_int("SCHEMA_GUARD_LOG_MAX_BYTES", "5242880", minimum=1),
    log_backup_count=_parse_int("SCHEMA_GUARD_LOG_BACKUP_COUNT", "10", minimum=0),
  )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process, after reading the local .env file."""

  load_env_file(default_env_path(), override=False)
  return load_settings()
