"""Kernel contracts – compatibility modes and the per-format support table."""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping

from schema_compat.kernel.contracts.contract import SchemaType


class Direction(str, Enum):
    """Which side of the check must be able to read the other."""

    NONE = "NONE"
    BACKWARD = "BACKWARD"
    FORWARD = "FORWARD"
    FULL = "FULL"

    @property
    def checks_backward(self) -> bool:
        return self in (Direction.BACKWARD, Direction.FULL)

    @property
    def checks_forward(self) -> bool:
        return self in (Direction.FORWARD, Direction.FULL)


class CompatibilityMode(str, Enum):
    """Schema registry compatibility rules.

    - backward: consumers using the new schema can read data written with
      older schemas.
    - forward: consumers using older schemas can read data written with the
      new schema.
    - full: both.
    - transitive: the rule must hold against *every* registered version,
      otherwise only against the latest one.
    """

    NONE = "NONE"
    BACKWARD = "BACKWARD"
    BACKWARD_TRANSITIVE = "BACKWARD_TRANSITIVE"
    FORWARD = "FORWARD"
    FORWARD_TRANSITIVE = "FORWARD_TRANSITIVE"
    FULL = "FULL"
    FULL_TRANSITIVE = "FULL_TRANSITIVE"

    @property
    def is_transitive(self) -> bool:
        return self.value.endswith("_TRANSITIVE")

    @property
    def direction(self) -> Direction:
        return Direction(self.value.removesuffix("_TRANSITIVE"))


_ALL_MODES = frozenset(CompatibilityMode)

SUPPORTED_MODES: Mapping[SchemaType, frozenset[CompatibilityMode]] = MappingProxyType({
    SchemaType.AVRO: _ALL_MODES,
    SchemaType.JSON: _ALL_MODES,
    SchemaType.PROTOBUF: frozenset({
        CompatibilityMode.NONE,
        CompatibilityMode.BACKWARD,
        CompatibilityMode.BACKWARD_TRANSITIVE,
    }),
    SchemaType.UNKNOWN: _ALL_MODES,
})


def supports(schema_type: SchemaType, mode: CompatibilityMode) -> bool:
    """Return ``True`` when *schema_type* can be checked under *mode*."""
    return mode in SUPPORTED_MODES[schema_type]


__all__ = ["CompatibilityMode", "Direction", "SUPPORTED_MODES", "supports"]
