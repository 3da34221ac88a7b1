"""Glue between settings, the database engine and the single-flight verifier."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from schema_guard.config import Settings
from schema_guard.core.database import create_engine_for, redact_dsn
from schema_guard.core.exceptions import ConfigurationError
from schema_guard.schema.model_meta import OrderState
from schema_guard.schema.registry import ModelRegistry
from schema_guard.services.failure_policy import DelayThenTerminatePolicy, FailurePolicy
from schema_guard.services.verifier import VerifierState, VerifyOptions, validate_schemas
from schema_guard.storage.live_schema import SqlAlchemyIntrospector

logger = logging.getLogger("schema_guard.services.startup")


def build_options(settings: Settings, order_states: Sequence[OrderState] = ()) -> VerifyOptions:
  """Translate settings into run options."""
  return VerifyOptions(exclude=frozenset(settings.exclude_tables), orders_table=settings.orders_table, order_states=tuple(order_states))


def build_policy(settings: Settings) -> FailurePolicy:
  """Return the delay-then-terminate policy configured by settings."""
  return DelayThenTerminatePolicy(delay_seconds=settings.failure_delay_seconds, terminate=settings.terminate_on_failure)


async def verify_database(
  settings: Settings,
  registry: ModelRegistry,
  *,
  state: VerifierState,
  order_states: Sequence[OrderState] = (),
  policy: FailurePolicy | None = None,
) -> bool:
  """Open a connection to the configured database and run the verifier once."""
  if state.result is not None:
    return state.result

  if not settings.dsn:
    raise ConfigurationError("SCHEMA_GUARD_DSN must be set to verify the schema.")

  engine, dialect = create_engine_for(settings.dsn, echo=settings.debug)
  logger.info("Verifying schema of %s (dialect=%s, schema=%s).", redact_dsn(settings.dsn), dialect.value, settings.db_schema or "<default>")
  try:
    async with engine.connect() as connection:
      introspector = SqlAlchemyIntrospector(connection, dialect, schema=settings.db_schema)
      return await validate_schemas(state, introspector, registry, dialect, build_options(settings, order_states), policy if policy is not None else build_policy(settings))
  finally:
    await engine.dispose()
