"""Database connection settings.

This module holds the connection parameters for the PostgreSQL/Supabase
backend and knows how to turn them into a SQLAlchemy URL and the
``psycopg2`` connect arguments. The connection layer only ever receives
the resolved values, never environment variable names.
"""

from typing import Any, Dict
from urllib.parse import urlparse

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import SettingsConfigDict
from sqlalchemy.engine import URL

from dblib.common.exceptions import ConfigurationError

from .base import DBLibBaseSettings


SUPABASE_DEFAULT_DATABASE = "postgres"
SUPABASE_DEFAULT_USER = "postgres"
DRIVER_NAME = "postgresql+psycopg2"


class DatabaseSettings(DBLibBaseSettings):
    """Connection settings for a PostgreSQL-compatible database.

    Environment variables use the ``DB_`` prefix (``DB_HOST``, ``DB_PORT``,
    ``DB_DATABASE``, ``DB_USERNAME``, ``DB_PASSWORD``, ``DB_SSL_MODE``,
    ``DB_CONNECT_TIMEOUT``, ...). The application name is read from
    ``DB_APP_NAME``.

    Timeouts:
        connect_timeout is in seconds. statement_timeout and
        idle_in_transaction_session_timeout are in milliseconds and are
        passed to the server as session options; 0 disables them.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host name")
    port: int = Field(default=5432, ge=1, le=65535, description="Database port")
    database: str = Field(default="", description="Database name")
    username: str = Field(default="", description="Login role")
    password: SecretStr = Field(default=SecretStr(""), description="Login password")
    ssl_mode: str = Field(
        default="prefer",
        description="libpq sslmode (disable, allow, prefer, require, verify-ca, verify-full)"
    )
    connect_timeout: int = Field(default=10, ge=0, description="Connect timeout in seconds")
    statement_timeout: int = Field(default=0, ge=0, description="Statement timeout in milliseconds")
    idle_in_transaction_session_timeout: int = Field(
        default=0,
        ge=0,
        description="Idle-in-transaction timeout in milliseconds"
    )
    application_name: str = Field(
        default="DatabaseLibrary",
        validation_alias=AliasChoices("application_name", "DB_APP_NAME"),
        description="Application name reported to the server"
    )

    @classmethod
    def from_supabase_url(cls, supabase_url: str, password: str) -> "DatabaseSettings":
        """Build settings from a Supabase project or database URL.

        Only host and port are taken from the URL. Database and user are the
        Supabase defaults and SSL is required.

        Raises:
            ConfigurationError: If the URL has no host
        """
        parsed = urlparse(supabase_url)
        if not parsed.hostname:
            raise ConfigurationError(
                "Invalid Supabase URL format",
                details={"url": supabase_url},
            )

        return cls(
            host=parsed.hostname,
            port=parsed.port or 5432,
            database=SUPABASE_DEFAULT_DATABASE,
            username=SUPABASE_DEFAULT_USER,
            password=SecretStr(password),
            ssl_mode="require",
            application_name="DatabaseLibrary-Supabase",
        )

    def validate_required(self) -> None:
        """Ensure the values needed to open a connection are present.

        Raises:
            ConfigurationError: Naming the first missing key
        """
        values = {
            "host": self.host,
            "database": self.database,
            "username": self.username,
            "password": self.password.get_secret_value(),
        }
        for key, value in values.items():
            if not value:
                raise ConfigurationError(
                    f"Required configuration key '{key}' is missing or empty",
                    details={"config_key": key},
                )

    @property
    def is_supabase(self) -> bool:
        return "supabase" in self.host or self.ssl_mode == "require"

    def sqlalchemy_url(self) -> URL:
        """SQLAlchemy URL for the psycopg2 driver."""
        self.validate_required()
        return URL.create(
            DRIVER_NAME,
            username=self.username,
            password=self.password.get_secret_value(),
            host=self.host,
            port=self.port,
            database=self.database,
        )

    def connect_args(self) -> Dict[str, Any]:
        """Keyword arguments forwarded to ``psycopg2.connect``."""
        args: Dict[str, Any] = {
            "sslmode": self.ssl_mode,
            "connect_timeout": self.connect_timeout,
            "application_name": self.application_name,
        }

        options = []
        if self.statement_timeout:
            options.append(f"-c statement_timeout={self.statement_timeout}")
        if self.idle_in_transaction_session_timeout:
            options.append(
                f"-c idle_in_transaction_session_timeout={self.idle_in_transaction_session_timeout}"
            )
        if options:
            args["options"] = " ".join(options)

        return args
