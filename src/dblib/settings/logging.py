"""Logging configuration settings.

Drives ``QueryLogger.from_settings``: the enabled flag, the level
threshold and the size-rotating log file.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from .base import DBLibBaseSettings


class LoggingSettings(DBLibBaseSettings):
    """Configuration for database activity logging.

    Environment variables use the ``LOG_`` prefix, e.g. ``LOG_LEVEL=DEBUG``.
    """

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
        extra="ignore",
    )

    file: Optional[str] = Field(
        default="database.log",
        description="Path of the rotating log file; empty disables file output"
    )
    level: str = Field(
        default="INFO",
        description="Minimum level written (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    enabled: bool = Field(
        default=True,
        description="Whether query/connection/transaction entries are emitted"
    )
    max_size: int = Field(
        default=10 * 1024 * 1024,
        ge=1,
        description="Size in bytes at which the log file is rotated"
    )
    max_files: int = Field(
        default=5,
        ge=0,
        description="Number of rotated log files kept"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("file")
    @classmethod
    def empty_file_disables(cls, v: Optional[str]) -> Optional[str]:
        return v or None
