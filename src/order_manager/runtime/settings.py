"""Environment variables that override values from config.yaml."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.order_manager.runtime.config.config_data import ConfigData


class EnvironmentVariables(BaseSettings):
    """Simple primitive values loaded from environment variables and .env files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] | None = Field(
        default=None, validation_alias="APP_ENVIRONMENT"
    )
    log_level: str | None = Field(default=None, validation_alias="LOG_LEVEL")
    database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")
    cors_origin: str | None = Field(default=None, validation_alias="CORS_ORIGIN")

    def apply(self, config: ConfigData) -> ConfigData:
        """Return a copy of `config` with every variable that is set applied."""
        updated = config.model_copy(deep=True)
        if self.environment:
            updated.app.environment = self.environment
        if self.log_level:
            updated.logging.level = self.log_level.upper()
        if self.database_url:
            updated.database.url = self.database_url
        if self.cors_origin:
            updated.app.cors.origins = [
                origin.strip() for origin in self.cors_origin.split(",") if origin.strip()
            ]
        return updated
