"""Config – 12-factor settings and loaders."""

from schema_compat.config.settings import EnvSettingsLoader, Settings, SettingsLoader, VerifierSettings
from schema_compat.config.validation import ConfigError, InvalidSettingValueError, MissingRequiredSettingError

__all__ = [
    "ConfigError",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsLoader",
    "VerifierSettings",
]
