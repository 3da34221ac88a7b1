"""Startup verification of live database schemas against declared models."""

from schema_guard.schema.diagnostics import CheckKind, Diagnostic, VerificationReport
from schema_guard.schema.model_meta import Dialect, OrderState
from schema_guard.services.verifier import VerifierState, VerifyOptions, validate_schemas, verify

__all__ = ["CheckKind", "Diagnostic", "Dialect", "OrderState", "VerificationReport", "VerifierState", "VerifyOptions", "validate_schemas", "verify"]
