"""Observability – metric ports and the no-op backend."""
from schema_compat.observability.metrics.noop import NoopMetrics
from schema_compat.observability.metrics.ports import Counter, Histogram, Metrics

__all__ = ["Counter", "Histogram", "Metrics", "NoopMetrics"]
