"""
Configuration management for hireflow.

Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Base paths
ROOT_DIR = Path(__file__).parent.parent.parent
PACKAGE_DIR = ROOT_DIR / "hireflow"
DATA_DIR = ROOT_DIR / "data"

DEFAULT_WEBHOOK_URL = "https://aiagentsworkbysk01.app.n8n.cloud/webhook/candidate-screening"


class DatabaseSettings(BaseSettings):
    """MongoDB database and GridFS configuration."""

    model_config = SettingsConfigDict(env_prefix="DB_")

    host: str = "localhost"
    port: int = 27017
    name: str = "hireflow"
    username: str | None = None
    password: str | None = None

    # GridFS bucket holding uploaded resumes
    resume_bucket: str = "resumes"


class WebhookSettings(BaseSettings):
    """External screening workflow (n8n) configuration."""

    model_config = SettingsConfigDict(env_prefix="N8N_")

    webhook_url: str = DEFAULT_WEBHOOK_URL
    timeout_seconds: float = 120.0

    @field_validator("webhook_url")
    @classmethod
    def fallback_when_blank(cls, v: str) -> str:
        """An empty env value means the hardcoded default."""
        return v.strip() or DEFAULT_WEBHOOK_URL


class ProxySettings(BaseSettings):
    """Forwarding proxy HTTP service configuration."""

    model_config = SettingsConfigDict(env_prefix="PROXY_")

    host: str = "0.0.0.0"
    port: int = 8000
    route: str = "/functions/v1/resume-screening"
    public_base_url: str = "http://localhost:8000"
    allowed_headers: str = "authorization, x-client-info, apikey, content-type"


class PipelineSettings(BaseSettings):
    """Client-side resume ingestion pipeline configuration."""

    model_config = SettingsConfigDict(env_prefix="PIPELINE_")

    # Where the upload pipeline submits resumes (the forwarding proxy)
    proxy_url: str = "http://localhost:8000/functions/v1/resume-screening"

    # Bounded timeouts so a hung call ends the task in error
    request_timeout_seconds: float = 180.0
    step_timeout_seconds: float = 60.0

    # 1 keeps the observed one-file-at-a-time behaviour
    max_concurrency: int = Field(default=1, ge=1, le=16)

    max_file_size_mb: int = 5


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
    file_path: Path = ROOT_DIR / "logs" / "hireflow.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    console_output: bool = True
    file_output: bool = True


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    name: str = "hireflow"
    version: str = "0.1.0"
    description: str = "Resume ingestion and screening-webhook relay"
    debug: bool = False

    environment: Literal["development", "production", "testing"] = "development"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    webhook: WebhookSettings = Field(default_factory=WebhookSettings)
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


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
