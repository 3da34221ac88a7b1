"""Render abstract model attribute types as the DDL strings each dialect reports."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping

from schema_guard.schema.model_meta import AttributeKind, ColumnType, Dialect, ModelAttribute

logger = logging.getLogger("schema_guard.services.type_mapper")

Renderer = Callable[[ColumnType], str]


def _const(ddl: str) -> Renderer:
  return lambda _column_type: ddl


def _sized(prefix: str, default_length: int | None = None) -> Renderer:
  def render(column_type: ColumnType) -> str:
    length = column_type.length if column_type.length is not None else default_length
    # Unsized types are reported bare, e.g. CHARACTER VARYING.
    return prefix if length is None else f"{prefix}({length})"

  return render


def _decimal(column_type: ColumnType) -> str:
  if column_type.precision is None:
    return "DECIMAL"
  # MySQL stores DECIMAL(M) as DECIMAL(M,0).
  return f"DECIMAL({column_type.precision},{column_type.scale or 0})"


# None marks a kind the dialect deliberately does not support.
_POSTGRES: dict[AttributeKind, Renderer | None] = {
  AttributeKind.CHAR: None,
  AttributeKind.VARCHAR: _sized("CHARACTER VARYING"),
  AttributeKind.TINYINT: None,
  AttributeKind.INTEGER: _const("INTEGER"),
  AttributeKind.BIGINT: _const("BIGINT"),
  AttributeKind.DATE: _const("DATE"),
  AttributeKind.DATETIME: _const("TIMESTAMP WITH TIME ZONE"),
  AttributeKind.TEXT: None,
  AttributeKind.JSON: None,
  AttributeKind.BOOLEAN: None,
  AttributeKind.DECIMAL: None,
  AttributeKind.UUID: None,
  AttributeKind.OTHER: None,
}

_MYSQL: dict[AttributeKind, Renderer | None] = {
  AttributeKind.CHAR: _sized("CHAR", default_length=1),
  AttributeKind.VARCHAR: _sized("VARCHAR"),
  AttributeKind.TINYINT: _const("TINYINT"),
  AttributeKind.INTEGER: _const("INT"),
  AttributeKind.BIGINT: _const("BIGINT"),
  AttributeKind.DATE: _const("DATE"),
  AttributeKind.DATETIME: _const("DATETIME"),
  AttributeKind.TEXT: _const("TEXT"),
  AttributeKind.JSON: _const("JSON"),
  AttributeKind.BOOLEAN: _const("TINYINT(1)"),
  AttributeKind.DECIMAL: _decimal,
  # RFC 4122 text form is 36 characters.
  AttributeKind.UUID: _const("VARCHAR(40)"),
  AttributeKind.OTHER: None,
}

DIALECT_TYPE_TABLES: Mapping[Dialect, Mapping[AttributeKind, Renderer | None]] = {
  Dialect.POSTGRES: _POSTGRES,
  Dialect.MYSQL: _MYSQL,
}


def _assert_exhaustive() -> None:
  """Fail at import time when a dialect table forgets an attribute kind."""
  expected = set(AttributeKind)
  for dialect in Dialect:
    missing = expected - set(DIALECT_TYPE_TABLES[dialect])
    if missing:
      raise RuntimeError(f"Type table for {dialect.value} is missing kinds: {sorted(kind.value for kind in missing)}")


_assert_exhaustive()


def map_type(dialect: Dialect, attribute: ModelAttribute) -> str | None:
  """Return the canonical DDL type for ``attribute`` or None when unsupported."""
  renderer = DIALECT_TYPE_TABLES[dialect][attribute.type.kind]
  if renderer is None:
    logger.error("%s is not a supported schema type for %s.\n%s", attribute.field_name, dialect.value, json.dumps(attribute.describe()))
    return None
  return renderer(attribute.type)
