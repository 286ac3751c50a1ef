"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./taskpilot.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending transactional emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of transactional messages",
        min_length=3,
    )
    frontend_url: str = Field(
        default="http://localhost:3001",
        description="Base URL of the web client, used to build links inside emails",
    )
    support_email: str = Field(
        default="support@taskpilot.com",
        description="Contact address shown in account related emails",
    )
    company_name: str = Field(default="TaskPilot")
    app_timezone: str | None = Field(
        default=None,
        description="IANA timezone name used for timestamps",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    due_soon_check_interval_minutes: int = Field(
        default=60,
        ge=0,
        description="Minutes between due-date reminder sweeps; 0 disables the sweep",
    )
    due_soon_window_hours: int = Field(
        default=24, ge=1, description="Tasks due within this many hours get a reminder"
    )

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
