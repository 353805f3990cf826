"""credmap configuration (environment variables and .env files)."""

from credmap.config.settings import LOG_LEVELS, Settings, get_settings

__all__ = ["LOG_LEVELS", "Settings", "get_settings"]
