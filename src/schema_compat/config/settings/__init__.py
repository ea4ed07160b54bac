"""Config settings – 12-factor env-based configuration."""
from schema_compat.config.settings.base import Settings, VerifierSettings
from schema_compat.config.settings.loaders import EnvSettingsLoader, SettingsLoader

__all__ = ["EnvSettingsLoader", "Settings", "SettingsLoader", "VerifierSettings"]
