from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict


class DBLibBaseSettings(BaseSettings):
    """Base class for every dblib settings model.

    Reads ``.env`` and the process environment, ignores unknown keys and
    matches variable names case-insensitively. Domain settings narrow the
    lookup with their own ``env_prefix``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__"
    )

    def model_post_init(self, __context: Any) -> None:
        """Post initialization hook for additional setup.

        Subclasses should override this method and call super() to add
        custom initialization logic.

        Args:
            __context: Pydantic context object (internal use)
        """
        super().model_post_init(__context)
