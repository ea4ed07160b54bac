"""Compatibility – verdict and difference value objects."""
from __future__ import annotations

import dataclasses
from typing import Iterable


@dataclasses.dataclass(frozen=True)
class CompatibilityDifference:
    """One human-readable reason a schema pair is incompatible.

    ``context`` locates the offending element inside the schema, using a
    JSON-pointer-like path (``/fields/amount/type``).
    """

    message: str
    context: str = "/"

    def __str__(self) -> str:
        return f"{self.context}: {self.message}"


@dataclasses.dataclass(frozen=True)
class CompatibilityResult:
    """Verdict of a compatibility check plus its ordered differences."""

    is_compatible: bool
    differences: tuple[CompatibilityDifference, ...] = ()

    def __bool__(self) -> bool:
        return self.is_compatible

    @classmethod
    def compatible(cls) -> "CompatibilityResult":
        return _COMPATIBLE

    @classmethod
    def incompatible(cls, differences: Iterable[CompatibilityDifference]) -> "CompatibilityResult":
        return cls(is_compatible=False, differences=tuple(differences))

    @classmethod
    def from_differences(cls, differences: Iterable[CompatibilityDifference]) -> "CompatibilityResult":
        """Compatible exactly when *differences* is empty."""
        found = tuple(differences)
        if not found:
            return _COMPATIBLE
        return cls(is_compatible=False, differences=found)


_COMPATIBLE = CompatibilityResult(is_compatible=True)


__all__ = ["CompatibilityDifference", "CompatibilityResult"]
