"""Compare live foreign-key constraints with model-declared references."""

from __future__ import annotations

from collections.abc import Sequence

from schema_guard.schema.diagnostics import CheckKind, Diagnostic
from schema_guard.schema.model_meta import Dialect, IntrospectedForeignKey, RawModel


def _unquote(identifier: str) -> str:
  return identifier.replace('"', "").replace("`", "")


def check_foreign_keys(table_name: str, foreign_keys: Sequence[IntrospectedForeignKey], model: RawModel, dialect: Dialect) -> list[Diagnostic]:
  """Return a diagnostic for every live foreign key the model does not declare.

  MySQL is skipped entirely: its constraints are not enumerated reliably, so
  foreign keys there are only checked indirectly through their indexes.
  """
  if dialect is Dialect.MYSQL:
    return []

  diagnostics: list[Diagnostic] = []
  for foreign_key in foreign_keys:
    column = _unquote(foreign_key.column)
    target = f"{foreign_key.target_table}.{foreign_key.target_column}"
    attribute = model.attributes.get(column)
    if attribute is None or attribute.reference is None:
      diagnostics.append(Diagnostic(table_name, CheckKind.UNDECLARED_FOREIGN_KEY, f"{table_name}.[{column}] must be defined foreign key (database references {target})."))
      continue

    if attribute.reference.target_key != _unquote(foreign_key.target_column):
      diagnostics.append(
        Diagnostic(
          table_name,
          CheckKind.FOREIGN_KEY_TARGET_MISMATCH,
          f"{table_name}.{column} => {attribute.reference.target_table}.{attribute.reference.target_key} must be same to foreignKey [{target}].",
        )
      )

  return diagnostics
