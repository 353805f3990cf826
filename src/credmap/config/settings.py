"""
Application settings using Pydantic.

Provides environment-based configuration loading with CREDMAP_ prefix.
These only set CLI defaults; the matching tables are fixed data.
"""

from functools import lru_cache
from typing import Literal, get_args

from pydantic_settings import BaseSettings

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_LEVELS: tuple[str, ...] = get_args(LogLevel)


class Settings(BaseSettings):
    """Application settings."""

    # Logging
    log_level: LogLevel = "WARNING"

    # Export defaults
    default_mode: Literal["full", "slim"] = "full"
    default_format: Literal["json", "yaml"] = "json"

    # Detector extraction
    strict: bool = False
    allow_ip_hosts: bool = False
    max_reported_warnings: int = 5

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "CREDMAP_"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
