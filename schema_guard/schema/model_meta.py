"""Declared model metadata and live introspection records compared by the verifier."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


class Dialect(str, enum.Enum):
  """SQL dialect families the verifier understands."""

  POSTGRES = "postgres"
  MYSQL = "mysql"


class AttributeKind(str, enum.Enum):
  """Closed set of abstract column types a model attribute can declare."""

  CHAR = "char"
  VARCHAR = "varchar"
  TINYINT = "tinyint"
  INTEGER = "integer"
  BIGINT = "bigint"
  DATE = "date"
  DATETIME = "datetime"
  TEXT = "text"
  JSON = "json"
  BOOLEAN = "boolean"
  DECIMAL = "decimal"
  UUID = "uuid"
  OTHER = "other"


@dataclass(frozen=True)
class ColumnType:
  """Abstract column type with the parameters the DDL rendering needs."""

  kind: AttributeKind
  length: int | None = None
  precision: int | None = None
  scale: int | None = None
  # Declared type name, kept for diagnostics when the kind is OTHER.
  type_name: str | None = None

  def describe(self) -> str:
    """Return a compact human-readable form such as ``varchar(255)``."""
    if self.kind is AttributeKind.OTHER:
      return self.type_name or "other"
    if self.kind is AttributeKind.DECIMAL and self.precision is not None:
      return f"decimal({self.precision},{self.scale or 0})"
    if self.length is not None:
      return f"{self.kind.value}({self.length})"
    return self.kind.value


@dataclass(frozen=True)
class ModelReference:
  """Foreign-key target declared on a model attribute."""

  target_table: str
  target_key: str


@dataclass(frozen=True)
class ModelAttribute:
  """Abstract declaration of one table column."""

  field_name: str
  type: ColumnType
  primary_key: bool = False
  # None means the model did not say; nullable is the default.
  allow_null: bool | None = None
  unique: bool = False
  reference: ModelReference | None = None

  @property
  def nullable(self) -> bool:
    """Effective nullability, treating an undeclared flag as nullable."""
    return True if self.allow_null is None else self.allow_null

  def describe(self) -> dict[str, Any]:
    """Return the full declaration as a plain dict for log output."""
    return {
      "field": self.field_name,
      "type": self.type.describe(),
      "primaryKey": self.primary_key,
      "allowNull": self.allow_null,
      "unique": self.unique,
      "references": None if self.reference is None else {"model": self.reference.target_table, "key": self.reference.target_key},
    }


@dataclass(frozen=True)
class ModelIndex:
  """Index declared alongside a model."""

  fields: tuple[str, ...]
  unique: bool = False
  name: str | None = None

  @property
  def field_set(self) -> frozenset[str]:
    return frozenset(self.fields)


@dataclass(frozen=True)
class RawModel:
  """Full declaration of one application table."""

  table_name: str
  attributes: Mapping[str, ModelAttribute]
  primary_keys: frozenset[str] = frozenset()
  indexes: tuple[ModelIndex, ...] = ()

  def find_index(self, fields: frozenset[str]) -> ModelIndex | None:
    """Return the declared index whose field set equals ``fields``, if any."""
    for index in self.indexes:
      if index.field_set == fields:
        return index
    return None


@dataclass(frozen=True)
class IntrospectedColumn:
  """Column as described by the live database."""

  type: str
  allow_null: bool
  primary_key: bool
  default_value: Any = None


@dataclass(frozen=True)
class IntrospectedForeignKey:
  """Foreign-key constraint reported by the live database, one per column pair."""

  column: str
  target_table: str
  target_column: str
  name: str | None = None


@dataclass(frozen=True)
class IntrospectedIndex:
  """Index reported by the live database, including generated ones."""

  fields: tuple[str, ...]
  unique: bool
  primary: bool = False
  name: str | None = None

  @property
  def field_set(self) -> frozenset[str]:
    return frozenset(self.fields)


@dataclass(frozen=True)
class OrderState:
  """One step of the order lifecycle, optionally backed by a timestamp column."""

  name: str
  dt_column: str | None = None
