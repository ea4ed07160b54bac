"""Unit tests for config settings, loaders and errors."""

import logging
from dataclasses import dataclass, field
from typing import ClassVar

import pytest

from schema_compat.config import (
    ConfigError,
    EnvSettingsLoader,
    InvalidSettingValueError,
    MissingRequiredSettingError,
    Settings,
    VerifierSettings,
)
from schema_compat.kernel.errors import ApplicationError


@dataclass
class AppSettings(Settings):
    _prefix: ClassVar[str] = "APP"

    host: str = "localhost"
    port: int = 8080
    ratio: float = 0.5
    debug: bool = False
    subjects: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# EnvSettingsLoader
# ---------------------------------------------------------------------------


class TestEnvSettingsLoader:
    def test_loads_from_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_HOST", "registry.internal")
        monkeypatch.setenv("APP_PORT", "8081")
        settings = EnvSettingsLoader().load(AppSettings)
        assert settings.host == "registry.internal"
        assert settings.port == 8081

    def test_coerces_scalars_and_lists(self) -> None:
        environ = {
            "APP_RATIO": "0.25",
            "APP_DEBUG": "yes",
            "APP_SUBJECTS": "orders-value, payments-value,,",
        }
        settings = EnvSettingsLoader(environ).load(AppSettings)
        assert settings.ratio == 0.25
        assert settings.debug is True
        assert settings.subjects == ["orders-value", "payments-value"]

    @pytest.mark.parametrize("falsy", ["false", "0", "no", "off", "anything"])
    def test_bool_false_values(self, falsy: str) -> None:
        assert EnvSettingsLoader({"APP_DEBUG": falsy}).load(AppSettings).debug is False

    def test_defaults_preserved_when_absent(self) -> None:
        settings = EnvSettingsLoader({}).load(AppSettings)
        assert settings == AppSettings()

    def test_unparseable_value(self) -> None:
        with pytest.raises(InvalidSettingValueError) as exc_info:
            EnvSettingsLoader({"APP_PORT": "eighty"}).load(AppSettings)
        assert exc_info.value.setting_name == "APP_PORT"
        assert exc_info.value.value == "eighty"

    def test_missing_required_raises(self) -> None:
        @dataclass
        class StrictSettings(Settings):
            _prefix: ClassVar[str] = "STRICT"
            registry_url: str = field()

        with pytest.raises(MissingRequiredSettingError) as exc_info:
            EnvSettingsLoader({}).load(StrictSettings)
        assert "STRICT_REGISTRY_URL" in str(exc_info.value)

    def test_constructor_failure_wrapped_in_config_error(self) -> None:
        @dataclass
        class FragileSettings(Settings):
            _prefix: ClassVar[str] = "FRAGILE"
            name: str = "x"

            def _validate(self) -> None:
                raise RuntimeError("boom")

        with pytest.raises(ConfigError, match="boom"):
            EnvSettingsLoader({}).load(FragileSettings)


# ---------------------------------------------------------------------------
# VerifierSettings
# ---------------------------------------------------------------------------


class TestVerifierSettings:
    def test_defaults(self) -> None:
        settings = VerifierSettings()
        assert settings.log_level == "INFO"
        assert settings.json_logs is True
        assert settings.log_definitions is False
        assert settings.strict_unknown_types is False

    def test_loaded_with_prefix(self) -> None:
        environ = {
            "SCHEMA_COMPAT_LOG_LEVEL": "debug",
            "SCHEMA_COMPAT_JSON_LOGS": "false",
            "SCHEMA_COMPAT_STRICT_UNKNOWN_TYPES": "true",
        }
        settings = EnvSettingsLoader(environ).load(VerifierSettings)
        assert settings.log_level == "DEBUG"
        assert settings.log_level_value == logging.DEBUG
        assert settings.json_logs is False
        assert settings.strict_unknown_types is True

    def test_invalid_log_level(self) -> None:
        with pytest.raises(InvalidSettingValueError) as exc_info:
            EnvSettingsLoader({"SCHEMA_COMPAT_LOG_LEVEL": "chatty"}).load(VerifierSettings)
        assert exc_info.value.setting_name == "log_level"


# ---------------------------------------------------------------------------
# ConfigErrors
# ---------------------------------------------------------------------------


class TestConfigErrors:
    def test_hierarchy(self) -> None:
        assert issubclass(ConfigError, ApplicationError)
        assert issubclass(MissingRequiredSettingError, ConfigError)
        assert issubclass(InvalidSettingValueError, ConfigError)

    def test_codes(self) -> None:
        assert ConfigError("bad").code == "config_error"
        assert MissingRequiredSettingError("X").code == "missing_required_setting"
        assert InvalidSettingValueError("X", 1, "no").code == "invalid_setting_value"

    def test_invalid_value_message(self) -> None:
        err = InvalidSettingValueError("SCHEMA_COMPAT_LOG_LEVEL", "chatty", "not a level")
        assert err.message == "Invalid value 'chatty' for setting 'SCHEMA_COMPAT_LOG_LEVEL': not a level"
        assert err.detail == {"setting": "SCHEMA_COMPAT_LOG_LEVEL", "reason": "not a level"}

    def test_missing_setting_detail(self) -> None:
        err = MissingRequiredSettingError("SCHEMA_COMPAT_REGISTRY_URL")
        assert err.detail == {"setting": "SCHEMA_COMPAT_REGISTRY_URL"}
        assert "not set" in err.message
