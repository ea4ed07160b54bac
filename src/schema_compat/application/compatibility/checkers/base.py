"""Compatibility checkers – SchemaChecker base."""
from __future__ import annotations

import abc
from typing import ClassVar, Sequence

from schema_compat.application.compatibility.result import CompatibilityDifference, CompatibilityResult
from schema_compat.kernel.contracts import CompatibilityMode, SchemaType, supports
from schema_compat.kernel.errors import SchemaParseError, UnsupportedCompatibilityModeError


class SchemaChecker(abc.ABC):
    """Evaluate one compatibility level for a single schema format.

    Subclasses implement :meth:`compare` for a single reader/writer pair;
    :meth:`test` applies the mode's direction and scope on top of it.
    """

    schema_type: ClassVar[SchemaType]

    def test(
        self,
        mode: CompatibilityMode,
        existing: Sequence[str],
        proposed: str,
    ) -> CompatibilityResult:
        """Check *proposed* against *existing* (oldest first) under *mode*.

        Latest-only modes look at ``existing[-1]``, transitive modes at every
        element.

        Raises
        ------
        UnsupportedCompatibilityModeError
            When *mode* is not supported for this checker's format.
        """
        if not supports(self.schema_type, mode):
            raise UnsupportedCompatibilityModeError(mode.value, self.schema_type.value)
        direction = mode.direction
        if not existing or not (direction.checks_backward or direction.checks_forward):
            return CompatibilityResult.compatible()

        targets = existing if mode.is_transitive else existing[-1:]
        differences: list[CompatibilityDifference] = []
        try:
            for previous in targets:
                if direction.checks_backward:
                    differences.extend(self.compare(reader=proposed, writer=previous))
                if direction.checks_forward:
                    differences.extend(self.compare(reader=previous, writer=proposed))
        except SchemaParseError as exc:
            return CompatibilityResult.incompatible([CompatibilityDifference(exc.message, exc.location)])
        return CompatibilityResult.from_differences(differences)

    @abc.abstractmethod
    def compare(self, reader: str, writer: str) -> list[CompatibilityDifference]:
        """Return why data written with *writer* cannot be read with *reader*."""


__all__ = ["SchemaChecker"]
