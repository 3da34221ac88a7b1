"""Verify a live database schema against declared SQLAlchemy models."""

from __future__ import annotations

import argparse
import asyncio
import importlib
import logging
import sys
from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from schema_guard.config import Settings, get_settings
from schema_guard.core.exceptions import SchemaGuardError
from schema_guard.core.logging import setup_logging
from schema_guard.schema.model_meta import OrderState
from schema_guard.schema.registry import registry_for
from schema_guard.services.failure_policy import DelayThenTerminatePolicy, LogOnlyPolicy
from schema_guard.services.startup import verify_database
from schema_guard.services.verifier import VerifierState

logger = logging.getLogger("scripts.verify_schema")


def load_object(path: str) -> Any:
  """Import ``package.module:attribute`` and return the attribute."""
  module_name, separator, attribute = path.partition(":")
  if not separator or not module_name or not attribute:
    raise ValueError(f"Expected 'package.module:attribute', got {path!r}.")

  target: Any = importlib.import_module(module_name)
  for part in attribute.split("."):
    target = getattr(target, part)
  return target


def coerce_order_states(raw: Iterable[Any]) -> list[OrderState]:
  """Accept OrderState items, mappings, or objects with ``name``/``dt_column``."""
  states: list[OrderState] = []
  for item in raw:
    if isinstance(item, OrderState):
      states.append(item)
    elif isinstance(item, dict):
      states.append(OrderState(name=str(item.get("name", "")), dt_column=item.get("dt_column")))
    else:
      # Enum-like members expose .name and, when backed by a column, .dt_column.
      dt_column = getattr(item, "dt_column", None)
      states.append(OrderState(name=str(getattr(item, "name", item)), dt_column=dt_column))
  return states


def _build_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(description="Fail when the live database schema drifts from the declared models.")
  parser.add_argument("--models", required=True, help="MetaData, declarative base, or registry as package.module:attribute")
  parser.add_argument("--order-states", default=None, help="Order lifecycle states as package.module:attribute")
  parser.add_argument("--dsn", default=None, help="Database URL; defaults to SCHEMA_GUARD_DSN")
  parser.add_argument("--schema", default=None, help="Database schema to inspect; defaults to SCHEMA_GUARD_DB_SCHEMA")
  parser.add_argument("--exclude", action="append", default=None, help="Table to skip (repeatable); replaces SCHEMA_GUARD_EXCLUDE_TABLES")
  parser.add_argument("--no-delay", action="store_true", help="Report drift without the startup alarm delay")
  return parser


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
  overrides: dict[str, Any] = {}
  if args.dsn:
    overrides["dsn"] = args.dsn
  if args.schema:
    overrides["db_schema"] = args.schema
  if args.exclude is not None:
    overrides["exclude_tables"] = tuple(args.exclude)
  return replace(settings, **overrides) if overrides else settings


def main(argv: Sequence[str] | None = None) -> None:
  """Entrypoint for schema verification."""
  args = _build_parser().parse_args(argv)
  settings = _apply_overrides(get_settings(), args)
  setup_logging(settings)

  try:
    registry = registry_for(load_object(args.models))
    order_states = coerce_order_states(load_object(args.order_states)) if args.order_states else []
  except (ImportError, AttributeError, TypeError, ValueError) as exc:
    logger.error("Could not load models: %s", exc)
    sys.exit(2)

  policy = LogOnlyPolicy() if args.no_delay else DelayThenTerminatePolicy(delay_seconds=settings.failure_delay_seconds, terminate=False)

  try:
    schema_valid = asyncio.run(verify_database(settings, registry, state=VerifierState(), order_states=order_states, policy=policy))
  except SchemaGuardError as exc:
    logger.error("ERROR: %s", exc)
    sys.exit(2)
  except (SQLAlchemyError, OSError) as exc:
    logger.error("Could not reach the database: %s", exc)
    sys.exit(2)

  if not schema_valid:
    sys.exit(1)

  logger.info("Schema verification passed.")


if __name__ == "__main__":
  main()
