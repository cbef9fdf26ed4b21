"""Application configuration management."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised application settings derived from environment variables."""

    storage_backend: str = Field(
        default="file",
        description="Persistence medium for the workout collection: memory, file or database.",
    )
    data_dir: Path = Field(default=Path("data"))
    storage_key: str = Field(
        default="workouts",
        min_length=1,
        description="Key under which the whole workout collection is stored.",
    )
    database_url: str = Field(
        default="sqlite:///./data/workout_log.db",
        description="SQLAlchemy-compatible database URL (database backend only).",
    )
    app_host: str = Field(default="0.0.0.0")
    app_port: int = Field(default=8000, ge=1, le=65535)

    debug: bool = Field(default=False)

    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("logs"))

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, value: str) -> str:
        """Only the media shipped with the app are accepted."""

        valid = {"memory", "file", "database"}
        lower = value.strip().lower()
        if lower not in valid:
            raise ValueError(f"STORAGE_BACKEND must be one of {', '.join(sorted(valid))}")
        return lower

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        valid = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        upper = value.upper()
        if upper not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(sorted(valid))}")
        return upper


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance so it can be reused across the app."""

    settings = Settings()
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    return settings
