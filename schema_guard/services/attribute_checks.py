"""Compare a table's live columns with the model attributes that declare them."""

from __future__ import annotations

from collections.abc import Mapping

from schema_guard.schema.diagnostics import CheckKind, Diagnostic, Severity
from schema_guard.schema.model_meta import AttributeKind, Dialect, IntrospectedColumn, RawModel
from schema_guard.services.type_mapper import map_type

# DDL SQLAlchemy emits for a Uuid column on MySQL, which the UUID mapping does not cover.
SQLALCHEMY_MYSQL_UUID = "CHAR(32)"


def check_attributes(table_name: str, columns: Mapping[str, IntrospectedColumn], model: RawModel, dialect: Dialect) -> list[Diagnostic]:
  """Return every column-level violation for ``table_name``.

  Each live column must be declared on the model with the same field name,
  the same canonical DDL type for ``dialect``, and the same primary-key and
  nullability flags. Checking continues past the first violation so the
  caller sees the whole table at once.
  """
  diagnostics: list[Diagnostic] = []
  for field_name, column in columns.items():
    attribute = model.attributes.get(field_name)
    if attribute is None:
      declared = ", ".join(sorted(model.attributes))
      diagnostics.append(Diagnostic(table_name, CheckKind.UNDECLARED_COLUMN, f"{table_name}.{field_name} is not defined. Model attributes: [{declared}]"))
      continue

    expected_type = map_type(dialect, attribute)
    if expected_type is None:
      diagnostics.append(
        Diagnostic(table_name, CheckKind.UNSUPPORTED_TYPE, f"{table_name}.{field_name} declares {attribute.type.describe()}, which has no {dialect.value} mapping", severity=Severity.WARNING)
      )

    if expected_type != column.type:
      message = f"{table_name}.{field_name} field type is invalid. Model.{field_name}.type[{expected_type}] != Table.{field_name}.type[{column.type}]"
      if dialect is Dialect.MYSQL and attribute.type.kind is AttributeKind.UUID and column.type == SQLALCHEMY_MYSQL_UUID:
        message += f" (SQLAlchemy creates Uuid as {SQLALCHEMY_MYSQL_UUID} on MySQL; declare the column as String(40) to match)"
      diagnostics.append(Diagnostic(table_name, CheckKind.TYPE_MISMATCH, message))

    if attribute.field_name != field_name:
      diagnostics.append(Diagnostic(table_name, CheckKind.FIELD_NAME_MISMATCH, f"fieldName is not same. Model.field[{attribute.field_name}] != Table.field[{field_name}]"))

    if attribute.primary_key != column.primary_key:
      diagnostics.append(
        Diagnostic(table_name, CheckKind.PRIMARY_KEY_MISMATCH, f"illegal primaryKey defined {table_name}.{field_name}. Model.primaryKey[{attribute.primary_key}] != Table.primaryKey[{column.primary_key}]")
      )

    if attribute.nullable != column.allow_null:
      diagnostics.append(
        Diagnostic(table_name, CheckKind.NULLABILITY_MISMATCH, f"illegal allowNull defined {table_name}.{field_name}. Model.allowNull[{attribute.allow_null}] != Table.allowNull[{column.allow_null}]")
      )

  return diagnostics
