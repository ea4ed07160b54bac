"""Compatibility checkers – NoopChecker for unrecognised formats."""
from __future__ import annotations

from schema_compat.application.compatibility.result import CompatibilityDifference
from schema_compat.application.compatibility.checkers.base import SchemaChecker
from schema_compat.kernel.contracts import SchemaType


class NoopChecker(SchemaChecker):
    """Accepts every schema pair."""

    schema_type = SchemaType.UNKNOWN

    def compare(self, reader: str, writer: str) -> list[CompatibilityDifference]:
        return []


__all__ = ["NoopChecker"]
