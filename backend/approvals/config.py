from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Leave Approvals"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Storage
    database_url: str = "postgresql+asyncpg://approvals:approvals@db:5432/approvals"
    db_pool_size: int = Field(default=5, ge=1)
    # Longest a transition waits for another writer's row lock before failing.
    db_lock_timeout_seconds: float = Field(default=5.0, gt=0)

    # Presentation and side effects
    display_locale: Literal["en", "th"] = "en"
    notifications_enabled: bool = True


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
