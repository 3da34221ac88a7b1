"""Live schema introspection over an async SQLAlchemy connection."""

from __future__ import annotations

from typing import Any, Protocol

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncConnection

from schema_guard.schema.model_meta import Dialect, IntrospectedColumn, IntrospectedForeignKey, IntrospectedIndex


class SchemaIntrospector(Protocol):
  """Read-only view of the live database catalog."""

  async def list_tables(self) -> list[str]:
    """Return every base table name in the target schema."""

  async def describe_table(self, table_name: str) -> dict[str, IntrospectedColumn]:
    """Return the table's columns keyed by field name, in ordinal order."""

  async def list_foreign_keys(self, table_name: str) -> list[IntrospectedForeignKey]:
    """Return one record per constrained column of every foreign key."""

  async def list_indexes(self, table_name: str) -> list[IntrospectedIndex]:
    """Return every index, including the primary key and generated ones."""


_POSTGRES_COLUMNS = text(
  """
  SELECT c.column_name,
         c.is_nullable,
         c.data_type,
         c.character_maximum_length,
         c.column_default,
         EXISTS (
           SELECT 1
           FROM information_schema.table_constraints tc
           JOIN information_schema.key_column_usage kcu
             ON tc.constraint_name = kcu.constraint_name
            AND tc.table_schema = kcu.table_schema
            AND tc.table_name = kcu.table_name
           WHERE tc.constraint_type = 'PRIMARY KEY'
             AND tc.table_schema = c.table_schema
             AND tc.table_name = c.table_name
             AND kcu.column_name = c.column_name
         ) AS is_primary
  FROM information_schema.columns c
  WHERE c.table_schema = COALESCE(CAST(:schema AS TEXT), current_schema())
    AND c.table_name = :table_name
  ORDER BY c.ordinal_position
  """
)

_MYSQL_COLUMNS = text(
  """
  SELECT COLUMN_NAME, IS_NULLABLE, COLUMN_TYPE, COLUMN_KEY, COLUMN_DEFAULT
  FROM information_schema.COLUMNS
  WHERE TABLE_SCHEMA = COALESCE(:schema, DATABASE())
    AND TABLE_NAME = :table_name
  ORDER BY ORDINAL_POSITION
  """
)


def unquote_identifier(identifier: str) -> str:
  """Strip the quote characters some catalogs leave around identifiers."""
  return identifier.strip().strip('"`')


def render_postgres_type(data_type: str, character_maximum_length: int | None) -> str:
  """Render ``information_schema`` type data the way the verifier compares it."""
  # e.g. ("character varying", 255) -> "CHARACTER VARYING(255)"
  rendered = data_type.upper()
  if character_maximum_length is not None:
    rendered = f"{rendered}({character_maximum_length})"
  return rendered


def render_mysql_type(column_type: str) -> str:
  """Normalize MySQL's COLUMN_TYPE, e.g. ``decimal(10,2)`` -> ``DECIMAL(10,2)``."""
  return column_type.strip().upper()


def postgres_column(row: Any) -> tuple[str, IntrospectedColumn]:
  """Build a column record from one Postgres catalog row."""
  name, is_nullable, data_type, max_length, default, is_primary = row
  column = IntrospectedColumn(type=render_postgres_type(data_type, max_length), allow_null=is_nullable == "YES", primary_key=bool(is_primary), default_value=default)
  return name, column


def mysql_column(row: Any) -> tuple[str, IntrospectedColumn]:
  """Build a column record from one MySQL catalog row."""
  name, is_nullable, column_type, column_key, default = row
  column = IntrospectedColumn(type=render_mysql_type(column_type), allow_null=is_nullable == "YES", primary_key=column_key == "PRI", default_value=default)
  return name, column


class SqlAlchemyIntrospector:
  """SchemaIntrospector backed by an open AsyncConnection.

  Tables, foreign keys, and indexes come from the SQLAlchemy inspector. Column
  types are read from ``information_schema`` so the comparison sees the DDL
  strings the server itself reports rather than SQLAlchemy's reflected types.
  """

  def __init__(self, connection: AsyncConnection, dialect: Dialect, *, schema: str | None = None) -> None:
    self._connection = connection
    self._dialect = dialect
    self._schema = schema

  async def list_tables(self) -> list[str]:
    def _tables(sync_connection: Connection) -> list[str]:
      return list(inspect(sync_connection).get_table_names(schema=self._schema))

    return sorted(await self._connection.run_sync(_tables))

  async def describe_table(self, table_name: str) -> dict[str, IntrospectedColumn]:
    statement = _POSTGRES_COLUMNS if self._dialect is Dialect.POSTGRES else _MYSQL_COLUMNS
    build = postgres_column if self._dialect is Dialect.POSTGRES else mysql_column
    result = await self._connection.execute(statement, {"schema": self._schema, "table_name": table_name})
    return dict(build(row) for row in result.fetchall())

  async def list_foreign_keys(self, table_name: str) -> list[IntrospectedForeignKey]:
    def _foreign_keys(sync_connection: Connection) -> list[IntrospectedForeignKey]:
      records: list[IntrospectedForeignKey] = []
      for foreign_key in inspect(sync_connection).get_foreign_keys(table_name, schema=self._schema):
        for column, target_column in zip(foreign_key["constrained_columns"], foreign_key["referred_columns"], strict=False):
          records.append(
            IntrospectedForeignKey(
              column=unquote_identifier(column),
              target_table=unquote_identifier(foreign_key["referred_table"]),
              target_column=unquote_identifier(target_column),
              name=foreign_key.get("name"),
            )
          )
      return records

    return await self._connection.run_sync(_foreign_keys)

  async def list_indexes(self, table_name: str) -> list[IntrospectedIndex]:
    def _indexes(sync_connection: Connection) -> list[IntrospectedIndex]:
      inspector = inspect(sync_connection)
      records: list[IntrospectedIndex] = []
      # The inspector reports the primary key separately from get_indexes.
      primary_key = inspector.get_pk_constraint(table_name, schema=self._schema)
      if primary_key.get("constrained_columns"):
        records.append(IntrospectedIndex(fields=tuple(primary_key["constrained_columns"]), unique=True, primary=True, name=primary_key.get("name")))

      for index in inspector.get_indexes(table_name, schema=self._schema):
        # Expression entries come back as None.
        fields = tuple(unquote_identifier(name) for name in index["column_names"] if name)
        if fields:
          records.append(IntrospectedIndex(fields=fields, unique=bool(index["unique"]), name=index.get("name")))
      return records

    return await self._connection.run_sync(_indexes)
