"""Compatibility – mode resolver.

Turns whatever the storage reports as a subject's mode into the pair the
rest of the engine needs: is the check transitive, and in which direction.
"""
from __future__ import annotations

import dataclasses
from typing import Any

from schema_compat.kernel.contracts import CompatibilityMode, Direction
from schema_compat.observability.logging import get_logger

_log = get_logger(__name__)


@dataclasses.dataclass(frozen=True)
class ModeResolution:
    """Resolved compatibility mode.

    ``mode`` is the level handed to the format checker. For values the
    engine does not recognise it is ``NONE`` and ``recognized`` is False.
    """

    mode: CompatibilityMode
    direction: Direction
    transitive: bool
    recognized: bool = True

    @property
    def latest_only(self) -> bool:
        return not self.transitive

    @property
    def is_none(self) -> bool:
        """True only for an explicitly configured ``NONE`` mode."""
        return self.recognized and self.mode is CompatibilityMode.NONE


_UNRECOGNIZED = ModeResolution(
    mode=CompatibilityMode.NONE,
    direction=Direction.NONE,
    transitive=False,
    recognized=False,
)


def _coerce(value: Any) -> CompatibilityMode | None:
    if isinstance(value, CompatibilityMode):
        return value
    if isinstance(value, str):
        try:
            return CompatibilityMode(value.strip().upper())
        except ValueError:
            return None
    return None


def resolve_mode(value: Any) -> ModeResolution:
    """Resolve *value* (a :class:`CompatibilityMode` or its name).

    Unrecognised values behave like a latest-only check with no direction,
    which always passes. A warning is logged so such subjects can be found.
    """
    mode = _coerce(value)
    if mode is None:
        _log.warning("compatibility.mode.unrecognized", mode=repr(value))
        return _UNRECOGNIZED
    return ModeResolution(mode=mode, direction=mode.direction, transitive=mode.is_transitive)


__all__ = ["ModeResolution", "resolve_mode"]
