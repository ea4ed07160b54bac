"""Testing support – fakes and property-based generators.

``schema_compat.testing.generators`` needs the ``test`` extra (hypothesis);
the fakes have no extra dependencies.
"""

from schema_compat.testing.fakes import FakeMetricsRegistry, InMemorySchemaStorage

__all__ = ["FakeMetricsRegistry", "InMemorySchemaStorage"]
