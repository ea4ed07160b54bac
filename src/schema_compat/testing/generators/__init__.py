"""Testing generators – property-based strategies."""
from schema_compat.testing.generators.strategies import (
    LATEST_ONLY_MODES,
    TRANSITIVE_MODES,
    compatibility_mode_strategy,
    mode_name_strategy,
    version_ids_strategy,
)

__all__ = [
    "LATEST_ONLY_MODES",
    "TRANSITIVE_MODES",
    "compatibility_mode_strategy",
    "mode_name_strategy",
    "version_ids_strategy",
]
