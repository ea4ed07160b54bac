"""Infrastructure errors – failures of the storage collaborator."""

from __future__ import annotations

from typing import Any

from schema_compat.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


class SchemaStorageError(InfrastructureError):
    """The schema storage collaborator failed to serve a request.

    Storage implementations raise this; the verifier lets it propagate
    unchanged.
    """

    default_code = "schema_storage_error"

    def __init__(
        self,
        operation: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"Schema storage operation '{operation}' failed", **kwargs)
        self.operation = operation


__all__ = ["InfrastructureError", "SchemaStorageError"]
