"""Kernel – framework-agnostic building blocks (errors, schema contracts)."""

from schema_compat.kernel.errors import (
    ApplicationError,
    BaseError,
    DomainError,
    IncompatibleSchemaChangeError,
    InfrastructureError,
    InvariantViolationError,
    SchemaParseError,
    SchemaStorageError,
    UnsupportedCompatibilityModeError,
    ValidationError,
)
from schema_compat.kernel.invariant import Invariant, ensure

__all__ = [
    "ApplicationError",
    "BaseError",
    "DomainError",
    "IncompatibleSchemaChangeError",
    "InfrastructureError",
    "Invariant",
    "InvariantViolationError",
    "SchemaParseError",
    "SchemaStorageError",
    "UnsupportedCompatibilityModeError",
    "ValidationError",
    "ensure",
]
