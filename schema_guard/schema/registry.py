"""Model registries that expose declared tables as RawModel records."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from sqlalchemy import Column, MetaData, Table, UniqueConstraint
from sqlalchemy import types as sqltypes
from sqlalchemy.dialects import mysql

from schema_guard.schema.model_meta import AttributeKind, ColumnType, ModelAttribute, ModelIndex, ModelReference, RawModel


class ModelRegistry(Protocol):
  """Source of declared model metadata."""

  def list_models(self) -> list[RawModel]:
    """Return every registered model."""


class StaticModelRegistry:
  """Registry over an explicit list of models."""

  def __init__(self, models: Iterable[RawModel]) -> None:
    self._models = list(models)

  def list_models(self) -> list[RawModel]:
    return list(self._models)


def column_type_from_sqlalchemy(type_: sqltypes.TypeEngine) -> ColumnType:
  """Classify a SQLAlchemy type into the closed attribute-kind set."""
  if isinstance(type_, sqltypes.TypeDecorator):
    return column_type_from_sqlalchemy(type_.impl_instance)

  # Subclasses are tested before their bases (Text and Enum are Strings, BigInteger is an Integer).
  if isinstance(type_, sqltypes.Boolean):
    return ColumnType(AttributeKind.BOOLEAN)
  if isinstance(type_, sqltypes.Uuid):
    return ColumnType(AttributeKind.UUID)
  if isinstance(type_, sqltypes.Enum):
    return ColumnType(AttributeKind.OTHER, type_name=type(type_).__name__)
  if isinstance(type_, sqltypes.Text):
    return ColumnType(AttributeKind.TEXT)
  if isinstance(type_, sqltypes.CHAR):
    return ColumnType(AttributeKind.CHAR, length=type_.length)
  if isinstance(type_, sqltypes.String):
    return ColumnType(AttributeKind.VARCHAR, length=type_.length)
  if isinstance(type_, sqltypes.BigInteger):
    return ColumnType(AttributeKind.BIGINT)
  if isinstance(type_, mysql.TINYINT):
    return ColumnType(AttributeKind.TINYINT)
  if isinstance(type_, sqltypes.SmallInteger):
    return ColumnType(AttributeKind.OTHER, type_name=type(type_).__name__)
  if isinstance(type_, sqltypes.Integer):
    return ColumnType(AttributeKind.INTEGER)
  if isinstance(type_, sqltypes.DateTime):
    return ColumnType(AttributeKind.DATETIME)
  if isinstance(type_, sqltypes.Date):
    return ColumnType(AttributeKind.DATE)
  if isinstance(type_, sqltypes.JSON):
    return ColumnType(AttributeKind.JSON)
  if isinstance(type_, sqltypes.Float):
    return ColumnType(AttributeKind.OTHER, type_name=type(type_).__name__)
  if isinstance(type_, sqltypes.Numeric):
    return ColumnType(AttributeKind.DECIMAL, precision=type_.precision, scale=type_.scale)

  return ColumnType(AttributeKind.OTHER, type_name=type(type_).__name__)


def _reference(column: Column) -> ModelReference | None:
  for foreign_key in column.foreign_keys:
    # target_fullname is "table.column" or "schema.table.column".
    table_part, key = foreign_key.target_fullname.rsplit(".", 1)
    return ModelReference(target_table=table_part.rsplit(".", 1)[-1], target_key=key)
  return None


def _single_unique_columns(table: Table) -> set[str]:
  names: set[str] = set()
  for constraint in table.constraints:
    if isinstance(constraint, UniqueConstraint) and len(constraint.columns) == 1:
      names.update(column.name for column in constraint.columns)
  return names


def raw_model_from_table(table: Table) -> RawModel:
  """Convert one SQLAlchemy Table into the verifier's RawModel."""
  unique_columns = _single_unique_columns(table)
  attributes = {
    column.name: ModelAttribute(
      field_name=column.name,
      type=column_type_from_sqlalchemy(column.type),
      primary_key=bool(column.primary_key),
      allow_null=bool(column.nullable),
      unique=bool(column.unique) or column.name in unique_columns,
      reference=_reference(column),
    )
    for column in table.columns
  }

  indexes: list[ModelIndex] = []
  for index in sorted(table.indexes, key=lambda item: str(item.name or "")):
    fields = tuple(column.name for column in index.columns)
    # Expression-only indexes have no plain columns to compare.
    if fields:
      indexes.append(ModelIndex(fields=fields, unique=bool(index.unique), name=index.name))

  for constraint in table.constraints:
    if isinstance(constraint, UniqueConstraint) and len(constraint.columns) > 1:
      indexes.append(ModelIndex(fields=tuple(column.name for column in constraint.columns), unique=True, name=constraint.name))

  primary_keys = frozenset(column.name for column in table.primary_key.columns)
  return RawModel(table_name=table.name, attributes=attributes, primary_keys=primary_keys, indexes=tuple(indexes))


class MetadataModelRegistry:
  """Registry backed by SQLAlchemy declarative metadata."""

  def __init__(self, metadata: MetaData) -> None:
    self._metadata = metadata

  def list_models(self) -> list[RawModel]:
    return [raw_model_from_table(table) for table in sorted(self._metadata.tables.values(), key=lambda table: table.name)]


def registry_for(source: MetaData | ModelRegistry | type) -> ModelRegistry:
  """Accept MetaData, a declarative base class, or a ready registry."""
  if isinstance(source, MetaData):
    return MetadataModelRegistry(source)
  metadata = getattr(source, "metadata", None)
  if isinstance(metadata, MetaData):
    return MetadataModelRegistry(metadata)
  if callable(getattr(source, "list_models", None)):
    return source
  raise TypeError(f"Cannot build a model registry from {source!r}.")
