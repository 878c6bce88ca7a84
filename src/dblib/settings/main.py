from typing import Optional

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from .base import DBLibBaseSettings
from .database import DatabaseSettings
from .logging import LoggingSettings


class _Settings(DBLibBaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__"
    )

    database: DatabaseSettings = Field(
        default_factory=DatabaseSettings,
        description="Database connection configuration"
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Database activity logging configuration"
    )


# Singleton instance
_settings: Optional[_Settings] = None


def get_settings(force_reload: bool = False) -> _Settings:
    """Get the singleton settings instance for the application.

    Settings are loaded from environment variables and ``.env`` on first
    access. Only the outermost application code should call this; library
    objects receive the resolved settings as constructor arguments.

    Args:
        force_reload: If True, creates a new Settings instance even if
                     one already exists.

    Returns:
        Settings: The singleton Settings instance

    Example:
        ```python
        settings = get_settings()
        assert settings is get_settings()
        ```
    """
    global _settings

    if _settings is None or force_reload:
        _settings = _Settings()

    return _settings


def _reload_settings() -> _Settings:
    """Force reload of settings.

    This is primarily for testing purposes where you need to reset
    the singleton instance.

    Returns:
        A fresh _Settings instance
    """
    global _settings
    _settings = None
    return get_settings(force_reload=True)
