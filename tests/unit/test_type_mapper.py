"""Unit tests for dialect type mapping."""

from __future__ import annotations

import logging

import pytest
from conftest import attr

from schema_guard.schema.model_meta import AttributeKind, Dialect
from schema_guard.services.type_mapper import DIALECT_TYPE_TABLES, map_type


@pytest.mark.parametrize(
  ("kind", "params", "expected"),
  [
    (AttributeKind.VARCHAR, {"length": 255}, "CHARACTER VARYING(255)"),
    (AttributeKind.BIGINT, {}, "BIGINT"),
    (AttributeKind.INTEGER, {}, "INTEGER"),
    (AttributeKind.DATETIME, {}, "TIMESTAMP WITH TIME ZONE"),
    (AttributeKind.DATE, {}, "DATE"),
  ],
)
def test_postgres_mapping(kind: AttributeKind, params: dict, expected: str) -> None:
  assert map_type(Dialect.POSTGRES, attr("field", kind, **params)) == expected


@pytest.mark.parametrize(
  ("kind", "params", "expected"),
  [
    (AttributeKind.CHAR, {"length": 2}, "CHAR(2)"),
    (AttributeKind.VARCHAR, {"length": 100}, "VARCHAR(100)"),
    (AttributeKind.BIGINT, {}, "BIGINT"),
    (AttributeKind.TINYINT, {}, "TINYINT"),
    (AttributeKind.INTEGER, {}, "INT"),
    (AttributeKind.DATE, {}, "DATE"),
    (AttributeKind.DATETIME, {}, "DATETIME"),
    (AttributeKind.TEXT, {}, "TEXT"),
    (AttributeKind.JSON, {}, "JSON"),
    (AttributeKind.BOOLEAN, {}, "TINYINT(1)"),
    (AttributeKind.DECIMAL, {"precision": 10, "scale": 2}, "DECIMAL(10,2)"),
    (AttributeKind.UUID, {}, "VARCHAR(40)"),
  ],
)
def test_mysql_mapping(kind: AttributeKind, params: dict, expected: str) -> None:
  assert map_type(Dialect.MYSQL, attr("field", kind, **params)) == expected


@pytest.mark.parametrize("kind", [AttributeKind.TEXT, AttributeKind.JSON, AttributeKind.BOOLEAN, AttributeKind.UUID, AttributeKind.CHAR, AttributeKind.OTHER])
def test_postgres_does_not_borrow_mysql_mappings(kind: AttributeKind) -> None:
  assert map_type(Dialect.POSTGRES, attr("field", kind, length=1)) is None


def test_unsupported_type_logs_field_and_declaration(caplog: pytest.LogCaptureFixture) -> None:
  attribute = attr("geom", AttributeKind.OTHER)
  with caplog.at_level(logging.ERROR, logger="schema_guard.services.type_mapper"):
    assert map_type(Dialect.MYSQL, attribute) is None
  assert "geom is not a supported schema type for mysql" in caplog.text
  assert '"primaryKey": false' in caplog.text


def test_every_dialect_table_covers_every_kind() -> None:
  for dialect in Dialect:
    assert set(DIALECT_TYPE_TABLES[dialect]) == set(AttributeKind)


def test_mapping_is_deterministic() -> None:
  attribute = attr("amount", AttributeKind.DECIMAL, precision=12, scale=4)
  assert {map_type(Dialect.MYSQL, attribute) for _ in range(5)} == {"DECIMAL(12,4)"}


@pytest.mark.parametrize(
  ("dialect", "kind", "params", "expected"),
  [
    (Dialect.POSTGRES, AttributeKind.VARCHAR, {}, "CHARACTER VARYING"),
    (Dialect.MYSQL, AttributeKind.VARCHAR, {}, "VARCHAR"),
    (Dialect.MYSQL, AttributeKind.CHAR, {}, "CHAR(1)"),
    (Dialect.MYSQL, AttributeKind.DECIMAL, {}, "DECIMAL"),
    (Dialect.MYSQL, AttributeKind.DECIMAL, {"precision": 12}, "DECIMAL(12,0)"),
  ],
)
def test_unsized_types_render_without_none(dialect: Dialect, kind: AttributeKind, params: dict, expected: str) -> None:
  rendered = map_type(dialect, attr("field", kind, **params))
  assert rendered == expected
  assert "None" not in rendered
