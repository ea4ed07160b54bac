"""Testing fakes – in-memory doubles for the storage and metrics ports."""
from schema_compat.testing.fakes.metrics import FakeMetricsRegistry
from schema_compat.testing.fakes.storage import InMemorySchemaStorage

__all__ = ["FakeMetricsRegistry", "InMemorySchemaStorage"]
