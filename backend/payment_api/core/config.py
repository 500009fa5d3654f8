"""
Configuration module for the payment system backend.

The Settings object centralizes environment-driven configuration so the rest
of the codebase reads one validated source of truth.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    project_name: str = Field(default="Payment System Backend", alias="PROJECT_NAME")
    environment: Literal["local", "test", "staging", "production"] = Field(
        default="local",
        alias="APP_ENV",
    )
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    metrics_enabled: bool = Field(
        default=True,
        alias="METRICS_ENABLED",
        description="Expose Prometheus metrics on /metrics.",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized = str(value).strip().upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"LOG_LEVEL must be a standard logging level, got {value!r}.")
        return normalized


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance so configuration is evaluated once."""
    return Settings()


settings = get_settings()
