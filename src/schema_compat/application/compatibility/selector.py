"""Compatibility – version selector."""
from __future__ import annotations

from typing import Iterable

from schema_compat.application.compatibility.modes import ModeResolution
from schema_compat.kernel.contracts import SchemaVersion


def select_versions(
    resolution: ModeResolution,
    versions: Iterable[SchemaVersion | str],
) -> list[SchemaVersion]:
    """Pick the version ids a candidate must be compared against.

    Ids are compared as integers, so ``"10"`` sorts after ``"9"``. An empty
    result means there is no history to violate. Latest-only modes select
    the single numerically largest id; transitive modes select all of them,
    ascending.
    """
    ids = [int(v) for v in versions]
    if not ids:
        return []
    if resolution.latest_only:
        return [max(ids)]
    return sorted(ids)


__all__ = ["select_versions"]
