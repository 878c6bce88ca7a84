
from dblib.__version__ import __version__

from dblib.manager import DatabaseManager

from dblib.query_builder import QueryBuilder, SupabaseQueryBuilder, sanitize_identifier
from dblib.connection import StatementResult, SupabaseConnection
from dblib.protocols import DatabaseConnection, StatementBuilder
from dblib.transaction import TransactionGuard, TransactionState

from dblib.common.exceptions import (
    ConfigurationError,
    ConnectionFailedError,
    DBLibError,
    ErrorCode,
    InvalidArgumentError,
    InvalidIdentifierError,
    NoActiveTransactionError,
    NoConnectionError,
    PlaceholderCollisionError,
    ProcedureFailedError,
    QueryFailedError,
    TransactionAlreadyActiveError,
    TransactionFailedError,
)

from dblib.logging import QueryLogger, setup_logging
from dblib.settings import DatabaseSettings, LoggingSettings, get_settings


__all__ = [
    "__version__",

    "DatabaseManager",
    "QueryBuilder",
    "SupabaseQueryBuilder",
    "sanitize_identifier",
    "SupabaseConnection",
    "StatementResult",
    "DatabaseConnection",
    "StatementBuilder",
    "TransactionGuard",
    "TransactionState",

    # Exceptions (public API)
    "DBLibError",
    "ErrorCode",
    "InvalidArgumentError",
    "InvalidIdentifierError",
    "PlaceholderCollisionError",
    "ConfigurationError",
    "ConnectionFailedError",
    "NoConnectionError",
    "QueryFailedError",
    "ProcedureFailedError",
    "TransactionFailedError",
    "TransactionAlreadyActiveError",
    "NoActiveTransactionError",

    "QueryLogger",
    "setup_logging",
    "DatabaseSettings",
    "LoggingSettings",
    "get_settings",
]
