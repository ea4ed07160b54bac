"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError                        (domain.py)
    │   ├── InvariantViolationError
    │   ├── ValidationError
    │   │   └── SchemaParseError
    │   ├── UnsupportedCompatibilityModeError
    │   └── IncompatibleSchemaChangeError
    ├── ApplicationError                   (application.py)
    └── InfrastructureError                (infrastructure.py)
        └── SchemaStorageError
"""

from schema_compat.kernel.errors.application import ApplicationError
from schema_compat.kernel.errors.base import BaseError
from schema_compat.kernel.errors.domain import (
    DomainError,
    IncompatibleSchemaChangeError,
    InvariantViolationError,
    SchemaParseError,
    UnsupportedCompatibilityModeError,
    ValidationError,
)
from schema_compat.kernel.errors.infrastructure import InfrastructureError, SchemaStorageError

__all__ = [
    "ApplicationError",
    "BaseError",
    "DomainError",
    "IncompatibleSchemaChangeError",
    "InfrastructureError",
    "InvariantViolationError",
    "SchemaParseError",
    "SchemaStorageError",
    "UnsupportedCompatibilityModeError",
    "ValidationError",
]
