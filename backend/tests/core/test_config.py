from __future__ import annotations

import pytest
from pydantic import ValidationError
from pydantic_settings import PydanticBaseSettingsSource

from payment_api.core.config import Settings, get_settings


class NoEnvSettings(Settings):
    """Helper subclass that ignores environment and .env files during validation."""

    model_config = Settings.model_config.copy()
    model_config["env_file"] = ()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[Settings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings,)


def build_settings(**overrides: object) -> Settings:
    return NoEnvSettings.model_validate(overrides)


def test_settings_defaults() -> None:
    settings = build_settings()

    assert settings.project_name == "Payment System Backend"
    assert settings.environment == "local"
    assert settings.debug is False
    assert settings.log_level == "INFO"
    assert settings.metrics_enabled is True


def test_log_level_is_normalized() -> None:
    assert build_settings(LOG_LEVEL=" debug ").log_level == "DEBUG"


def test_log_level_rejects_unknown_level() -> None:
    with pytest.raises(ValidationError) as exc_info:
        build_settings(LOG_LEVEL="chatty")

    assert "LOG_LEVEL must be a standard logging level" in str(exc_info.value)


def test_environment_is_restricted() -> None:
    with pytest.raises(ValidationError):
        build_settings(APP_ENV="sandbox")


def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "staging")
    monkeypatch.setenv("METRICS_ENABLED", "false")

    settings = Settings(_env_file=None)

    assert settings.environment == "staging"
    assert settings.metrics_enabled is False


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()
