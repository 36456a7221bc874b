"""
Configuration management for ResumeRank.

Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from resumerank.utils.constants import ACTION_AI_ANALYSIS, ACTION_API, ACTION_UPLOAD


# Base paths
ROOT_DIR = Path(__file__).parent.parent.parent
DATA_DIR = ROOT_DIR / "data"


class DatabaseSettings(BaseSettings):
    """MongoDB database configuration."""

    model_config = SettingsConfigDict(env_prefix="DB_")

    host: str = "localhost"
    port: int = 27017
    name: str = "resumerank"
    username: str | None = None
    password: str | None = None


class AISettings(BaseSettings):
    """Gemini inference service configuration."""

    model_config = SettingsConfigDict(env_prefix="GEMINI_")

    api_key: str | None = None
    model: str = "gemini-2.5-flash-lite"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_seconds: float = 120.0

    # Retry policy
    max_attempts: int = Field(default=3, ge=1)
    backoff_base_seconds: float = Field(default=2.0, ge=0.0)


class RateLimitSettings(BaseSettings):
    """Sliding-window rate limits, per user and action."""

    model_config = SettingsConfigDict(env_prefix="RATE_LIMIT_")

    backend: Literal["memory", "mongodb"] = "memory"
    window_seconds: int = Field(default=60, ge=1)
    ai_analysis_requests: int = Field(default=3, ge=1)
    upload_requests: int = Field(default=5, ge=1)
    api_requests: int = Field(default=10, ge=1)

    @property
    def limits(self) -> dict[str, int]:
        """Requests allowed per window, keyed by action."""
        return {
            ACTION_AI_ANALYSIS: self.ai_analysis_requests,
            ACTION_UPLOAD: self.upload_requests,
            ACTION_API: self.api_requests,
        }


class StorageSettings(BaseSettings):
    """Resume blob storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    backend: Literal["gridfs", "local"] = "gridfs"
    bucket_name: str = "resumes"
    local_directory: Path = DATA_DIR / "resumes"


class BroadcastSettings(BaseSettings):
    """Realtime change broadcast configuration."""

    model_config = SettingsConfigDict(env_prefix="BROADCAST_")

    backend: Literal["memory", "mongodb"] = "memory"
    collection_name: str = "realtime_events"
    capped_size_bytes: int = 16 * 1024 * 1024


class AnalysisSettings(BaseSettings):
    """Analysis pipeline limits."""

    model_config = SettingsConfigDict(env_prefix="ANALYSIS_")

    max_bulk_candidates: int = Field(default=50, ge=1)
    bulk_concurrency: int = Field(default=3, ge=1)
    default_ai_credits: int = Field(default=100, ge=0)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
    file_path: Path = ROOT_DIR / "logs" / "resumerank.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    console_output: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Accept lowercase level names from the environment."""
        return v.upper() if isinstance(v, str) else v


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    name: str = "ResumeRank"
    version: str = "0.1.0"
    description: str = "AI resume analysis pipeline"
    debug: bool = False

    # Environment
    environment: Literal["development", "production", "testing"] = "development"

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    ai: AISettings = Field(default_factory=AISettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    broadcast: BroadcastSettings = Field(default_factory=BroadcastSettings)
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Global settings instance (singleton pattern)
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reload_settings() -> AppSettings:
    """Force reload settings from environment."""
    global _settings
    _settings = AppSettings()
    return _settings


# Convenience exports
settings = get_settings()
