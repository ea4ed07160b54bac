"""Application compatibility – verify candidate schemas against subject history."""
from schema_compat.application.compatibility.checkers import (
    CHECKERS,
    AvroChecker,
    JsonSchemaChecker,
    NoopChecker,
    ProtobufChecker,
    SchemaChecker,
    checker_for,
)
from schema_compat.application.compatibility.modes import ModeResolution, resolve_mode
from schema_compat.application.compatibility.result import CompatibilityDifference, CompatibilityResult
from schema_compat.application.compatibility.selector import select_versions
from schema_compat.application.compatibility.verifier import CompatibilityVerifier, verify

__all__ = [
    "AvroChecker",
    "CHECKERS",
    "CompatibilityDifference",
    "CompatibilityResult",
    "CompatibilityVerifier",
    "JsonSchemaChecker",
    "ModeResolution",
    "NoopChecker",
    "ProtobufChecker",
    "SchemaChecker",
    "checker_for",
    "resolve_mode",
    "select_versions",
    "verify",
]
