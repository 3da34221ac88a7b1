"""Exception hierarchy for schema verification."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
  from schema_guard.schema.diagnostics import VerificationReport


class SchemaGuardError(Exception):
  """Base class for all schema-guard failures."""


class ConfigurationError(SchemaGuardError, ValueError):
  """Raised when environment configuration is missing or malformed."""


class UnsupportedDialectError(SchemaGuardError):
  """Raised when the database is neither Postgres- nor MySQL-family."""

  def __init__(self, dialect_name: str) -> None:
    super().__init__(f"Unsupported database dialect '{dialect_name}'; expected postgresql or mysql.")
    self.dialect_name = dialect_name


class SchemaMismatchError(SchemaGuardError):
  """Raised by callers that want drift surfaced as an exception."""

  def __init__(self, report: VerificationReport) -> None:
    from schema_guard.schema.diagnostics import format_failure_report

    super().__init__(format_failure_report(report))
    self.report = report
