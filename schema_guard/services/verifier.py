"""Verification orchestrator: run every checker over every modeled table."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable, Collection, Sequence
from dataclasses import dataclass, field

from schema_guard.schema.diagnostics import CheckKind, CheckPass, Diagnostic, Severity, VerificationReport
from schema_guard.schema.model_meta import Dialect, OrderState, RawModel
from schema_guard.schema.registry import ModelRegistry
from schema_guard.services.attribute_checks import check_attributes
from schema_guard.services.failure_policy import FailurePolicy
from schema_guard.services.foreign_key_checks import check_foreign_keys
from schema_guard.services.index_checks import check_indexes
from schema_guard.services.order_state_checks import DEFAULT_AUDIT_COLUMNS, DEFAULT_ORDERS_TABLE, check_order_state_columns
from schema_guard.storage.live_schema import SchemaIntrospector

logger = logging.getLogger("schema_guard.services.verifier")

DEFAULT_EXCLUDED_TABLES: frozenset[str] = frozenset({"alembic_version", "tags"})
# Bucket for failures that happen before any table is reached.
RUN_SCOPE = "*"


@dataclass(frozen=True)
class VerifyOptions:
  """Knobs for one verification run."""

  exclude: Collection[str] | Callable[[str], bool] = DEFAULT_EXCLUDED_TABLES
  orders_table: str = DEFAULT_ORDERS_TABLE
  order_states: Sequence[OrderState] = ()
  audit_columns: frozenset[str] = DEFAULT_AUDIT_COLUMNS

  def is_excluded(self, table_name: str) -> bool:
    if callable(self.exclude):
      return bool(self.exclude(table_name))
    return table_name in self.exclude


@dataclass
class VerifierState:
  """Single-flight guard and cached verdict owned by the caller."""

  lock: asyncio.Lock = field(default_factory=asyncio.Lock)
  attempted: bool = False
  result: bool | None = None
  report: VerificationReport | None = None

  def reset(self) -> None:
    """Forget the previous attempt so the next call runs a fresh verification."""
    self.attempted = False
    self.result = None
    self.report = None


def _log_diagnostics(diagnostics: list[Diagnostic]) -> None:
  for diagnostic in diagnostics:
    if diagnostic.severity is Severity.ERROR:
      logger.error("%s", diagnostic)
    elif diagnostic.severity is Severity.WARNING:
      logger.warning("%s", diagnostic)
    else:
      logger.info("%s", diagnostic)


async def _run_pass(report: VerificationReport, table_name: str, check_pass: CheckPass, check: Callable[[], Awaitable[list[Diagnostic]]]) -> bool:
  """Run one pass for one table, isolating unexpected errors to that table."""
  try:
    diagnostics = await check()
  except Exception as exc:  # noqa: BLE001
    logger.exception("The %s check crashed for table %s.", check_pass.value, table_name)
    diagnostics = [Diagnostic(table_name, CheckKind.INTROSPECTION_FAILED, f"{check_pass.value} check could not run for {table_name}: {type(exc).__name__}: {exc}")]

  _log_diagnostics(diagnostics)
  return report.table(table_name).record(check_pass, diagnostics)


async def _attribute_pass(introspector: SchemaIntrospector, table_name: str, model: RawModel, dialect: Dialect, options: VerifyOptions) -> list[Diagnostic]:
  columns = await introspector.describe_table(table_name)
  diagnostics = check_attributes(table_name, columns, model, dialect)
  if table_name == options.orders_table:
    diagnostics.extend(check_order_state_columns(table_name, columns.keys(), options.order_states, options.audit_columns))
  return diagnostics


async def _foreign_key_pass(introspector: SchemaIntrospector, table_name: str, model: RawModel, dialect: Dialect) -> list[Diagnostic]:
  return check_foreign_keys(table_name, await introspector.list_foreign_keys(table_name), model, dialect)


async def _index_pass(introspector: SchemaIntrospector, table_name: str, model: RawModel, dialect: Dialect) -> list[Diagnostic]:
  return check_indexes(table_name, await introspector.list_indexes(table_name), model, dialect)


async def verify(introspector: SchemaIntrospector, registry: ModelRegistry, dialect: Dialect, options: VerifyOptions | None = None) -> VerificationReport:
  """Compare every modeled live table against its model and return the report.

  Tables are processed in lexicographic order, in three sequential passes:
  attributes (plus the order lifecycle check), foreign keys, then indexes.
  A failure in one table never stops the others. Live tables without a model
  only produce informational notices.
  """
  options = options or VerifyOptions()
  report = VerificationReport()

  tables = sorted(await introspector.list_tables())
  models = {model.table_name: model for model in registry.list_models()}
  pairs = [(table_name, models[table_name]) for table_name in tables if not options.is_excluded(table_name) and table_name in models]
  logger.info("Validating %d of %d tables with dialect %s.", len(pairs), len(tables), dialect.value)

  for table_name, model in pairs:
    await _run_pass(report, table_name, CheckPass.ATTRIBUTES, lambda: _attribute_pass(introspector, table_name, model, dialect, options))

  for table_name, model in pairs:
    await _run_pass(report, table_name, CheckPass.FOREIGN_KEYS, lambda: _foreign_key_pass(introspector, table_name, model, dialect))

  for table_name, model in pairs:
    await _run_pass(report, table_name, CheckPass.INDEXES, lambda: _index_pass(introspector, table_name, model, dialect))

  for table_name in tables:
    if table_name not in models:
      notice = Diagnostic(table_name, CheckKind.UNMATCHED_TABLE, f"A Model('{table_name}') is not defined. Table({table_name}) exists on DB.", severity=Severity.INFO)
      report.notices.append(notice)
      logger.info("%s", notice)

  logger.info("Schema validation is %s..", "success" if report.ok else "failed")
  return report


async def validate_schemas(
  state: VerifierState,
  introspector: SchemaIntrospector,
  registry: ModelRegistry,
  dialect: Dialect,
  options: VerifyOptions | None = None,
  policy: FailurePolicy | None = None,
) -> bool:
  """Run verification at most once per ``state`` and return the verdict.

  Later calls return the cached verdict of the first attempt without touching
  the database. The lock is held until the failure policy returns, so
  concurrent callers wait for the first attempt to finish.
  """
  logger.info("[validate_schemas] pid:%d, validated: %s", os.getpid(), state.attempted)
  # Only a finished run may answer without the lock.
  if state.result is not None:
    return state.result

  async with state.lock:
    if state.result is not None:
      return state.result

    state.attempted = True
    try:
      report = await verify(introspector, registry, dialect, options)
    except Exception as exc:  # noqa: BLE001
      logger.exception("Schema validation aborted before completing.")
      report = VerificationReport()
      report.table(RUN_SCOPE).record(CheckPass.ATTRIBUTES, [Diagnostic(RUN_SCOPE, CheckKind.INTROSPECTION_FAILED, f"schema validation aborted: {type(exc).__name__}: {exc}")])

    state.report = report
    state.result = report.ok
    if not report.ok and policy is not None:
      await policy.on_failure(report)

  return report.ok
