"""Diagnostic records and the aggregated verification report."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from schema_guard.core.exceptions import SchemaMismatchError


class CheckKind(str, enum.Enum):
  """Kinds of drift the verifier can report."""

  UNSUPPORTED_TYPE = "UnsupportedType"
  UNDECLARED_COLUMN = "UndeclaredColumn"
  TYPE_MISMATCH = "TypeMismatch"
  FIELD_NAME_MISMATCH = "FieldNameMismatch"
  PRIMARY_KEY_MISMATCH = "PrimaryKeyMismatch"
  NULLABILITY_MISMATCH = "NullabilityMismatch"
  UNDECLARED_FOREIGN_KEY = "UndeclaredForeignKey"
  FOREIGN_KEY_TARGET_MISMATCH = "ForeignKeyTargetMismatch"
  PRIMARY_KEY_INDEX_MISMATCH = "PrimaryKeyIndexMismatch"
  COMPOSITE_INDEX_UNDECLARED = "CompositeIndexUndeclared"
  UNIQUE_FLAG_MISMATCH = "UniqueFlagMismatch"
  EXPECTED_UNIQUE_INDEX = "ExpectedUniqueIndex"
  UNEXPLAINED_FOREIGN_KEY_INDEX = "UnexplainedForeignKeyIndex"
  UNEXPLAINED_INDEX = "UnexplainedIndex"
  STATE_COLUMN_MISMATCH = "StateColumnMismatch"
  INTROSPECTION_FAILED = "IntrospectionFailed"
  UNMATCHED_TABLE = "UnmatchedTable"


class Severity(str, enum.Enum):
  """How a diagnostic affects the overall verdict."""

  ERROR = "error"
  WARNING = "warning"
  INFO = "info"


class CheckPass(str, enum.Enum):
  """Sequential passes the orchestrator runs over every table."""

  ATTRIBUTES = "attributes"
  FOREIGN_KEYS = "foreign_keys"
  INDEXES = "indexes"


@dataclass(frozen=True)
class Diagnostic:
  """One finding, localized to a table and optionally a field or index."""

  table: str
  kind: CheckKind
  message: str
  severity: Severity = Severity.ERROR

  @property
  def is_failure(self) -> bool:
    return self.severity is Severity.ERROR

  def __str__(self) -> str:
    return f"[{self.kind.value}] {self.message}"


@dataclass
class TableResult:
  """Per-table outcome accumulated across the three passes."""

  table: str
  diagnostics: list[Diagnostic] = field(default_factory=list)
  failed_passes: set[CheckPass] = field(default_factory=set)

  @property
  def ok(self) -> bool:
    return not self.failed_passes

  def record(self, check_pass: CheckPass, diagnostics: list[Diagnostic]) -> bool:
    """Attach one pass's findings and return whether that pass succeeded."""
    self.diagnostics.extend(diagnostics)
    passed = not any(diagnostic.is_failure for diagnostic in diagnostics)
    if not passed:
      self.failed_passes.add(check_pass)
    return passed


@dataclass
class VerificationReport:
  """Aggregated outcome of one verification run."""

  tables: dict[str, TableResult] = field(default_factory=dict)
  notices: list[Diagnostic] = field(default_factory=list)

  @property
  def ok(self) -> bool:
    """Logical AND of every per-table, per-pass outcome; notices never count."""
    return all(result.ok for result in self.tables.values())

  @property
  def diagnostics(self) -> list[Diagnostic]:
    """Every finding in table order followed by the advisory notices."""
    items: list[Diagnostic] = []
    for result in self.tables.values():
      items.extend(result.diagnostics)
    items.extend(self.notices)
    return items

  @property
  def failures(self) -> list[Diagnostic]:
    return [diagnostic for diagnostic in self.diagnostics if diagnostic.is_failure]

  def table(self, name: str) -> TableResult:
    """Return the result bucket for ``name``, creating it on first use."""
    if name not in self.tables:
      self.tables[name] = TableResult(table=name)
    return self.tables[name]

  def raise_for_failures(self) -> None:
    """Raise SchemaMismatchError when any table failed."""
    if not self.ok:
      raise SchemaMismatchError(self)


def format_failure_report(report: VerificationReport) -> str:
  """Format a single actionable failure report block."""
  # Group by table so operators can localize the drift quickly.
  lines = ["Schema verification failed:"]
  for name, result in report.tables.items():
    if result.ok:
      continue

    passes = ", ".join(sorted(check_pass.value for check_pass in result.failed_passes))
    lines.append(f"{name} (failed passes: {passes}):")
    for diagnostic in result.diagnostics:
      lines.append(f"- {diagnostic.severity.value}: {diagnostic}")

  if report.notices:
    lines.append("notices:")
    lines.extend([f"- {notice}" for notice in report.notices])

  return "\n".join(lines)
