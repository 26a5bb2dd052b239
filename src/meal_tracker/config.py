"""Application configuration."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    api_base_url: str = "http://localhost:8000/api"
    storage_path: Path | None = None
    storage_key: str = "session"
    storage_poll_interval_seconds: float = Field(default=1.0, gt=0)
    results_per_page: int = Field(default=10, gt=0)
    slow_load_threshold_seconds: float = Field(default=0.5, ge=0)
    request_timeout_seconds: float = Field(default=10, gt=0)
    login_path: str = "/login"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="MEAL_TRACKER_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
