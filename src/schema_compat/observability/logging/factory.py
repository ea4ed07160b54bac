"""Observability – JsonLoggerFactory."""
from __future__ import annotations

import logging
from typing import Any

import structlog

from schema_compat.config.settings import EnvSettingsLoader, VerifierSettings


class JsonLoggerFactory:
    """Configure structlog on top of the stdlib root logger."""

    @staticmethod
    def configure(level: int | str = logging.INFO, *, json_output: bool = True) -> None:
        """Install a single root handler rendering structlog events.

        Parameters
        ----------
        level:
            Root log level, as an int or a level name (``"DEBUG"``).
        json_output:
            Render JSON lines when True, human-readable console output otherwise.
        """
        if isinstance(level, str):
            level = logging.getLevelName(level.upper())

        shared_processors: list[Any] = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
        ]
        structlog.configure(
            processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        renderer: Any = (
            structlog.processors.JSONRenderer()
            if json_output
            else structlog.dev.ConsoleRenderer(colors=False)
        )
        formatter = structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        root = logging.getLogger()
        root.handlers.clear()
        root.addHandler(handler)
        root.setLevel(level)


def configure_logging(settings: VerifierSettings | None = None) -> VerifierSettings:
    """Apply the logging knobs of *settings*, loading them from the environment if omitted.

    Usage::

        settings = configure_logging()
        verifier = CompatibilityVerifier(storage, settings=settings)
    """
    if settings is None:
        settings = EnvSettingsLoader().load(VerifierSettings)
    JsonLoggerFactory.configure(settings.log_level_value, json_output=settings.json_logs)
    return settings


__all__ = ["JsonLoggerFactory", "configure_logging"]
