"""
Unified configuration for qrmfg services.

This module provides a single Settings class for the access-control core
and the HTTP surface built on top of it.
"""

from __future__ import annotations

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine project root for .env file loading (allows running from any CWD)
PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    Unified settings for qrmfg.

    Environment variables are loaded from .env file and can be overridden
    by actual environment variables.
    """

    # Service identification
    SERVICE_NAME: str = "qrmfg"

    # Logging
    LOG_LEVEL: str = "INFO"
    AUDIT_LOG_PATH: str = ""  # JSON-lines file for access audit records

    # Plant-based data filtering
    PLANT_FILTERING_ENABLED: bool = True
    DEFAULT_PLANT_FIELD: str = "plant_code"

    # Auth settings
    REQUIRE_AUTH: bool = True

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        extra="ignore"
    )


# Global settings instance
settings = Settings()  # type: ignore
