"""Config settings – Settings base class and VerifierSettings."""
from __future__ import annotations

import dataclasses
import logging
from typing import ClassVar

from schema_compat.config.validation import InvalidSettingValueError

_LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings."""

    _prefix: ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""


@dataclasses.dataclass
class VerifierSettings(Settings):
    """Runtime knobs of the compatibility verifier.

    Read from ``SCHEMA_COMPAT_*`` environment variables by
    :class:`~schema_compat.config.settings.EnvSettingsLoader`.

    ``strict_unknown_types`` makes schemas of an unrecognised type fail
    verification. It is off by default, where such schemas always pass.
    """

    _prefix: ClassVar[str] = "SCHEMA_COMPAT"

    log_level: str = "INFO"
    json_logs: bool = True
    log_definitions: bool = False
    strict_unknown_types: bool = False

    def _validate(self) -> None:
        level = self.log_level.upper()
        if level not in _LOG_LEVELS:
            raise InvalidSettingValueError("log_level", self.log_level, f"expected one of {sorted(_LOG_LEVELS)}")
        self.log_level = level

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)


__all__ = ["Settings", "VerifierSettings"]
