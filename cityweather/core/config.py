from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="APP_",
        case_sensitive=False,
    )

    env: str = Field(default="development")
    debug: bool = Field(default=False)
    docs_enabled: bool = Field(default=True)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")

    cors_origins: list[str] = Field(default_factory=list)
    trusted_hosts: list[str] = Field(default_factory=lambda: ["localhost", "127.0.0.1"])

    storage_backend: Literal["memory", "file"] = Field(default="file")
    storage_dir: Path = Field(default=Path(".cityweather"))
    max_history_entries: int = Field(default=50, ge=1, le=1000)

    openweather_api_key: str = Field(default="", max_length=128)
    openweather_base_url: AnyHttpUrl = Field(default="https://api.openweathermap.org/data/2.5")
    openweather_icon_url: AnyHttpUrl = Field(default="https://openweathermap.org/img/w")
    weather_timeout_seconds: float = Field(default=10.0, ge=1.0, le=30.0)

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"


def load_settings() -> Settings:
    settings = Settings()
    if not settings.cors_origins:
        settings.cors_origins = ["http://localhost:3000", "http://localhost:8000"]
    return settings
