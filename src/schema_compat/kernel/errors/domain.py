"""Domain errors – schema rules, invariants and compatibility violations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from schema_compat.kernel.errors.base import BaseError

if TYPE_CHECKING:
    from schema_compat.application.compatibility.result import CompatibilityDifference


class DomainError(BaseError):
    """Raised when a domain rule / invariant is violated."""

    default_code = "domain_error"


class InvariantViolationError(DomainError):
    """A data invariant was violated (e.g. storage returned the wrong versions)."""

    default_code = "invariant_violation"


class ValidationError(DomainError):
    """Input data does not meet validation rules.

    ``errors`` is a list of field-level validation failures.
    """

    default_code = "validation_error"

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.errors: list[dict[str, Any]] = errors or []

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base["errors"] = self.errors
        return base


class SchemaParseError(ValidationError):
    """A schema definition could not be parsed for its declared type.

    ``location`` points at the offending element when the parser knows it
    (a JSON pointer, ``line:column`` for syntax errors, or a token offset) and is also
    reported as the single entry of ``errors``.
    """

    default_code = "schema_parse_error"

    def __init__(self, schema_type: str, message: str, *, location: str = "/", **kwargs: Any) -> None:
        super().__init__(
            f"Invalid {schema_type} schema: {message}",
            errors=[{"location": location, "message": message}],
            **kwargs,
        )
        self.schema_type = schema_type
        self.location = location


class UnsupportedCompatibilityModeError(DomainError):
    """A checker was asked to evaluate a mode its format does not support.

    This is an invalid-state condition; the verifier reports it as
    *incompatible* instead of surfacing it to the caller.
    """

    default_code = "unsupported_compatibility_mode"

    def __init__(self, mode: str, schema_type: str, **kwargs: Any) -> None:
        super().__init__(
            f"Compatibility mode {mode} is not supported for {schema_type} schemas",
            **kwargs,
        )
        self.mode = mode
        self.schema_type = schema_type


class IncompatibleSchemaChangeError(DomainError):
    """The proposed schema violates the subject's compatibility policy."""

    default_code = "incompatible_schema_change"

    def __init__(
        self,
        message: str,
        *,
        differences: Sequence[CompatibilityDifference] = (),
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.differences = tuple(differences)

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base["differences"] = [
            {"message": d.message, "context": d.context} for d in self.differences
        ]
        return base


__all__ = [
    "DomainError",
    "IncompatibleSchemaChangeError",
    "InvariantViolationError",
    "SchemaParseError",
    "UnsupportedCompatibilityModeError",
    "ValidationError",
]
