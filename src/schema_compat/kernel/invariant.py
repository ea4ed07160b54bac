"""Invariant helpers for asserting data rules at collaborator boundaries."""

from __future__ import annotations

from schema_compat.kernel.errors.domain import InvariantViolationError


class Invariant:
    """Namespace for invariant assertions."""

    @staticmethod
    def require(condition: bool, message: str) -> None:
        """Raise ``InvariantViolationError`` when *condition* is False."""
        if not condition:
            raise InvariantViolationError(message)


def ensure(condition: bool, message: str) -> None:
    """Shorthand for ``Invariant.require``."""
    Invariant.require(condition, message)


__all__ = ["Invariant", "ensure"]
