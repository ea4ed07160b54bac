"""Observability – structured logging helpers."""
from schema_compat.observability.logging.factory import JsonLoggerFactory, configure_logging
from schema_compat.observability.logging.processors import get_logger

__all__ = ["JsonLoggerFactory", "configure_logging", "get_logger"]
