from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Leave Desk"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    database_url: str = "postgresql+asyncpg://leave_desk:leave_desk@db:5432/leave_desk"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Yearly configuration edit strategy. "upsert" keeps every year mutable
    # field by field; "lock" allows edits only until an admin locks the year.
    config_edit_mode: Literal["upsert", "lock"] = "upsert"
    forbid_sunday_holidays: bool = True
    # Pending requests reserve balance until they are decided or cancelled.
    count_pending_leaves: bool = True


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings | None) -> None:
    """Replace the cached settings (tests and embedded use)."""
    global _settings
    _settings = settings
