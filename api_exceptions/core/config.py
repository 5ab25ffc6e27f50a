"""Centralized configuration for error handling."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from api_exceptions.models.errors import ErrorKind


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="API_EXCEPTIONS_", env_file=".env", extra="ignore"
    )

    # Application error templates (errors/<status>.html)
    templates_dir: Path | None = Path("templates")
    # Namespace of the bundled default templates
    template_namespace: str = "api_exceptions"
    # Disable to always render JSON
    page_rendering: bool = True

    # Validation redirect target when the Referer is unusable
    redirect_fallback_url: str = "/"

    # Reporting
    dont_report: list[ErrorKind] = []
    log_level: str = "INFO"

    # Reference app session signing key
    session_secret: str = "change-me"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
