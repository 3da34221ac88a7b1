"""Shared fixtures: an in-memory introspector and model builders."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
  sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402

from schema_guard.config import Settings  # noqa: E402
from schema_guard.schema.model_meta import (  # noqa: E402
  AttributeKind,
  ColumnType,
  IntrospectedColumn,
  IntrospectedForeignKey,
  IntrospectedIndex,
  ModelAttribute,
  ModelIndex,
  RawModel,
)


class FakeIntrospector:
  """SchemaIntrospector over dicts, recording every call it serves."""

  def __init__(
    self,
    columns: dict[str, dict[str, IntrospectedColumn]],
    foreign_keys: dict[str, list[IntrospectedForeignKey]] | None = None,
    indexes: dict[str, list[IntrospectedIndex]] | None = None,
    failing: dict[str, Exception] | None = None,
  ) -> None:
    self.columns = columns
    self.foreign_keys = foreign_keys or {}
    self.indexes = indexes or {}
    self.failing = failing or {}
    self.calls: list[tuple[str, str | None]] = []

  def _maybe_fail(self, table_name: str) -> None:
    if table_name in self.failing:
      raise self.failing[table_name]

  async def list_tables(self) -> list[str]:
    self.calls.append(("list_tables", None))
    return list(self.columns)

  async def describe_table(self, table_name: str) -> dict[str, IntrospectedColumn]:
    self.calls.append(("describe_table", table_name))
    self._maybe_fail(table_name)
    return dict(self.columns[table_name])

  async def list_foreign_keys(self, table_name: str) -> list[IntrospectedForeignKey]:
    self.calls.append(("list_foreign_keys", table_name))
    return list(self.foreign_keys.get(table_name, []))

  async def list_indexes(self, table_name: str) -> list[IntrospectedIndex]:
    self.calls.append(("list_indexes", table_name))
    return list(self.indexes.get(table_name, []))


def attr(field_name: str, kind: AttributeKind = AttributeKind.INTEGER, **kwargs) -> ModelAttribute:
  """Build a ModelAttribute; type parameters (length/precision/scale) go to ColumnType."""
  type_kwargs = {key: kwargs.pop(key) for key in ("length", "precision", "scale") if key in kwargs}
  return ModelAttribute(field_name=field_name, type=ColumnType(kind, **type_kwargs), **kwargs)


def model(table_name: str, *attributes: ModelAttribute, indexes: tuple[ModelIndex, ...] = ()) -> RawModel:
  return RawModel(
    table_name=table_name,
    attributes={attribute.field_name: attribute for attribute in attributes},
    primary_keys=frozenset(attribute.field_name for attribute in attributes if attribute.primary_key),
    indexes=indexes,
  )


def col(type_: str, *, allow_null: bool = True, primary_key: bool = False) -> IntrospectedColumn:
  return IntrospectedColumn(type=type_, allow_null=allow_null, primary_key=primary_key)


def make_settings(**overrides) -> Settings:
  values = {
    "environment": "test",
    "debug": False,
    "dsn": "postgresql://app:secret@db/shop",
    "db_schema": None,
    "exclude_tables": ("alembic_version", "tags"),
    "orders_table": "orders",
    "failure_delay_seconds": 0.0,
    "terminate_on_failure": False,
    "log_dir": None,
    "log_max_bytes": 1_000_000,
    "log_backup_count": 1,
  }
  values.update(overrides)
  return Settings(**values)


@pytest.fixture
def anyio_backend():
  return "asyncio"


@pytest.fixture
def users_model() -> RawModel:
  return model(
    "users",
    attr("id", AttributeKind.BIGINT, primary_key=True, allow_null=False),
    attr("email", AttributeKind.VARCHAR, length=255, allow_null=False, unique=True),
    attr("nickname", AttributeKind.VARCHAR, length=64),
    attr("created_at", AttributeKind.DATETIME, allow_null=False),
  )


@pytest.fixture
def users_columns_postgres() -> dict[str, IntrospectedColumn]:
  return {
    "id": col("BIGINT", allow_null=False, primary_key=True),
    "email": col("CHARACTER VARYING(255)", allow_null=False),
    "nickname": col("CHARACTER VARYING(64)"),
    "created_at": col("TIMESTAMP WITH TIME ZONE", allow_null=False),
  }
