"""Explain every live index by a declared index, a unique attribute, or a primary key."""

from __future__ import annotations

from collections.abc import Sequence

from schema_guard.schema.diagnostics import CheckKind, Diagnostic
from schema_guard.schema.model_meta import Dialect, IntrospectedIndex, RawModel


def _label(index: IntrospectedIndex) -> str:
  fields = ",".join(index.fields)
  if index.name:
    return f"[{fields}] ({index.name}, unique={index.unique})"
  return f"[{fields}] (unique={index.unique})"


def _check_primary(table_name: str, index: IntrospectedIndex, model: RawModel) -> list[Diagnostic]:
  return [
    Diagnostic(table_name, CheckKind.PRIMARY_KEY_INDEX_MISMATCH, f"{table_name}.{field} must be primaryKey")
    for field in index.fields
    if field not in model.primary_keys
  ]


def _check_secondary(table_name: str, index: IntrospectedIndex, model: RawModel, dialect: Dialect) -> Diagnostic | None:
  declared = model.find_index(index.field_set)
  if len(index.fields) > 1 and declared is None:
    return Diagnostic(table_name, CheckKind.COMPOSITE_INDEX_UNDECLARED, f"{table_name}.{_label(index)} must be defined combination key")

  # Declared indexes win over anything inferred from column attributes.
  if declared is not None:
    if declared.unique != index.unique:
      return Diagnostic(table_name, CheckKind.UNIQUE_FLAG_MISMATCH, f"{table_name}.{_label(index)} must be same unique value as model index (unique={declared.unique})")
    return None

  attribute = model.attributes.get(index.fields[0])
  if attribute is not None and attribute.unique:
    if not index.unique:
      return Diagnostic(table_name, CheckKind.EXPECTED_UNIQUE_INDEX, f"{table_name}.{_label(index)} must be defined unique key")
    return None

  if attribute is not None and attribute.reference is not None:
    # MySQL creates an index for every foreign key on its own.
    if dialect is not Dialect.MYSQL:
      return Diagnostic(table_name, CheckKind.UNEXPLAINED_FOREIGN_KEY_INDEX, f"{table_name}.{_label(index)} is auto created index by mysql, but dialect is {dialect.value}")
    return None

  return Diagnostic(table_name, CheckKind.UNEXPLAINED_INDEX, f"{table_name}.{_label(index)} is not defined index.")


def check_indexes(table_name: str, indexes: Sequence[IntrospectedIndex], model: RawModel, dialect: Dialect) -> list[Diagnostic]:
  """Return a diagnostic for every live index the model cannot explain."""
  diagnostics: list[Diagnostic] = []
  for index in indexes:
    if not index.fields:
      continue

    if index.primary:
      diagnostics.extend(_check_primary(table_name, index, model))
      continue

    diagnostic = _check_secondary(table_name, index, model, dialect)
    if diagnostic is not None:
      diagnostics.append(diagnostic)

  return diagnostics
