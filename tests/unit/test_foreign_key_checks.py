"""Unit tests for foreign-key comparison."""

from __future__ import annotations

from conftest import attr, model

from schema_guard.schema.diagnostics import CheckKind
from schema_guard.schema.model_meta import AttributeKind, Dialect, IntrospectedForeignKey, ModelReference
from schema_guard.services.foreign_key_checks import check_foreign_keys

ORDERS = model(
  "orders",
  attr("id", AttributeKind.BIGINT, primary_key=True, allow_null=False),
  attr("user_id", AttributeKind.BIGINT, reference=ModelReference("users", "id")),
  attr("coupon_id", AttributeKind.BIGINT),
)


def test_declared_reference_passes() -> None:
  fks = [IntrospectedForeignKey(column="user_id", target_table="users", target_column="id")]
  assert check_foreign_keys("orders", fks, ORDERS, Dialect.POSTGRES) == []


def test_quoted_column_names_are_normalized() -> None:
  fks = [IntrospectedForeignKey(column='"user_id"', target_table="users", target_column='"id"')]
  assert check_foreign_keys("orders", fks, ORDERS, Dialect.POSTGRES) == []


def test_missing_reference_is_flagged_on_postgres() -> None:
  fks = [IntrospectedForeignKey(column="coupon_id", target_table="coupons", target_column="id")]
  (diagnostic,) = check_foreign_keys("orders", fks, ORDERS, Dialect.POSTGRES)
  assert diagnostic.kind is CheckKind.UNDECLARED_FOREIGN_KEY
  assert "orders.[coupon_id]" in diagnostic.message


def test_unknown_source_column_is_flagged() -> None:
  fks = [IntrospectedForeignKey(column="warehouse_id", target_table="warehouses", target_column="id")]
  (diagnostic,) = check_foreign_keys("orders", fks, ORDERS, Dialect.POSTGRES)
  assert diagnostic.kind is CheckKind.UNDECLARED_FOREIGN_KEY


def test_target_key_mismatch_is_flagged() -> None:
  fks = [IntrospectedForeignKey(column="user_id", target_table="users", target_column="uuid")]
  (diagnostic,) = check_foreign_keys("orders", fks, ORDERS, Dialect.POSTGRES)
  assert diagnostic.kind is CheckKind.FOREIGN_KEY_TARGET_MISMATCH
  assert "[users.uuid]" in diagnostic.message


def test_mysql_is_never_flagged() -> None:
  fks = [
    IntrospectedForeignKey(column="coupon_id", target_table="coupons", target_column="id"),
    IntrospectedForeignKey(column="user_id", target_table="users", target_column="uuid"),
  ]
  assert check_foreign_keys("orders", fks, ORDERS, Dialect.MYSQL) == []
