"""Application configuration using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    app_name: str = Field(default="Weekly Production Report", alias="APP_NAME")

    # Database
    database_url: str = Field(default="sqlite:///./weekly_tracker.db", alias="DATABASE_URL")

    # Local time used for week boundaries and the submission gate
    timezone: str = Field(default="America/Chicago", alias="TIMEZONE")

    # Submission opens on this weekday (0=Monday .. 6=Sunday) at this hour
    submit_weekday: int = Field(default=6, ge=0, le=6, alias="SUBMIT_WEEKDAY")
    submit_hour: int = Field(default=18, ge=0, le=23, alias="SUBMIT_HOUR")

    # Form behaviour
    validation_message_seconds: float = Field(default=3.0, alias="VALIDATION_MESSAGE_SECONDS")

    # Observability
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


settings = Settings()
