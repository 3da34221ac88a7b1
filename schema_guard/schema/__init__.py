"""Schema package exports."""

from .diagnostics import CheckKind, CheckPass, Diagnostic, Severity, TableResult, VerificationReport, format_failure_report
from .model_meta import AttributeKind, ColumnType, Dialect, IntrospectedColumn, IntrospectedForeignKey, IntrospectedIndex, ModelAttribute, ModelIndex, ModelReference, OrderState, RawModel
from .registry import MetadataModelRegistry, ModelRegistry, StaticModelRegistry, registry_for

__all__ = [
  "AttributeKind",
  "CheckKind",
  "CheckPass",
  "ColumnType",
  "Diagnostic",
  "Dialect",
  "IntrospectedColumn",
  "IntrospectedForeignKey",
  "IntrospectedIndex",
  "MetadataModelRegistry",
  "ModelAttribute",
  "ModelIndex",
  "ModelReference",
  "ModelRegistry",
  "OrderState",
  "RawModel",
  "Severity",
  "StaticModelRegistry",
  "TableResult",
  "VerificationReport",
  "format_failure_report",
  "registry_for",
]
