from __future__ import annotations

"""Application settings using Pydantic Settings.

Loads configuration from environment variables and optional .env file.
"""

import os
from functools import lru_cache

from pydantic import AnyHttpUrl, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_positive_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    try:
        value = float(raw) if raw is not None else default
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


class PollingSettings(BaseModel):
    # Defaults used when an item does not set pollingInterval / pollingTimeout
    interval_seconds: float = Field(5, gt=0)
    timeout_seconds: float = Field(600, gt=0)


class Settings(BaseSettings):
    """Top-level application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",  # allow flat extra env like POLL_INTERVAL_SECONDS
    )

    # Gladia
    gladia_api_key: str = ""
    gladia_base_url: AnyHttpUrl = AnyHttpUrl("https://api.gladia.io")
    http_timeout_seconds: float = 60.0

    # Shared secret the workflow host sends in X-Connector-Secret (empty = open)
    connector_secret: str = ""

    # App
    app_host: str = "0.0.0.0"
    app_port: int = 8080

    # Logging
    log_level: str = "INFO"

    polling: PollingSettings = Field(default_factory=PollingSettings)

    @field_validator("log_level")
    @classmethod
    def _validate_level(cls, v: str) -> str:
        levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in levels:
            raise ValueError("Invalid LOG_LEVEL")
        return v.upper()

    @property
    def base_url(self) -> str:
        return str(self.gladia_base_url).rstrip("/")

    def model_post_init(self, __context: dict[str, object]) -> None:  # type: ignore[override]
        """Map flat env vars into nested settings for convenience."""

        self.polling.interval_seconds = _get_positive_float_env("POLL_INTERVAL_SECONDS", self.polling.interval_seconds)
        self.polling.timeout_seconds = _get_positive_float_env("POLL_TIMEOUT_SECONDS", self.polling.timeout_seconds)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached Settings instance."""

    return Settings()  # type: ignore[call-arg]
