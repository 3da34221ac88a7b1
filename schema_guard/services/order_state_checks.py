"""Keep the orders table's timestamp columns aligned with the order lifecycle."""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence

from schema_guard.schema.diagnostics import CheckKind, Diagnostic
from schema_guard.schema.model_meta import OrderState

TIMESTAMP_MARKER = "_at"
DEFAULT_ORDERS_TABLE = "orders"
DEFAULT_AUDIT_COLUMNS: frozenset[str] = frozenset({"touched_at", "issued_at", "updated_at", "deleted_at", "created_at", "inspected_at"})


def state_columns(order_states: Sequence[OrderState]) -> list[str]:
  """Return the sorted, deduplicated timestamp columns the lifecycle declares."""
  return sorted({state.dt_column for state in order_states if state.dt_column})


def timestamp_columns(column_names: Iterable[str], claimed: Iterable[str] = (), audit_columns: frozenset[str] = DEFAULT_AUDIT_COLUMNS) -> list[str]:
  """Return the sorted lifecycle candidates among ``column_names``.

  Audit columns are ignored unless a lifecycle state claims them.
  """
  claimed_set = set(claimed)
  return sorted({name for name in column_names if TIMESTAMP_MARKER in name and (name not in audit_columns or name in claimed_set)})


def check_order_state_columns(
  table_name: str,
  column_names: Iterable[str],
  order_states: Sequence[OrderState],
  audit_columns: frozenset[str] = DEFAULT_AUDIT_COLUMNS,
) -> list[Diagnostic]:
  """Fail when the table's timestamp columns and the lifecycle states diverge."""
  expected = state_columns(order_states)
  actual = timestamp_columns(column_names, claimed=expected, audit_columns=audit_columns)
  if actual == expected:
    return []

  return [
    Diagnostic(
      table_name,
      CheckKind.STATE_COLUMN_MISMATCH,
      f"There are different date field between {table_name} and order states.\ntable: {json.dumps(actual)}\nstates: {json.dumps(expected)}",
    )
  ]
