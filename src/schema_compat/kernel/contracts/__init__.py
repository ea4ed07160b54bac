"""Kernel contracts – schemas, compatibility modes and the storage port."""
from schema_compat.kernel.contracts.contract import Schema, SchemaType, SchemaVersion, Subject
from schema_compat.kernel.contracts.compatibility import (
    SUPPORTED_MODES,
    CompatibilityMode,
    Direction,
    supports,
)
from schema_compat.kernel.contracts.storage import SchemaStorage

__all__ = [
    "CompatibilityMode",
    "Direction",
    "SUPPORTED_MODES",
    "Schema",
    "SchemaStorage",
    "SchemaType",
    "SchemaVersion",
    "Subject",
    "supports",
]
