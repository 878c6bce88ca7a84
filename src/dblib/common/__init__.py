"""Common exceptions for dblib.

Exception Design:
    Every failure is a ``DBLibError`` carrying an ``ErrorCode``. One small
    subclass exists per kind of failure callers need to tell apart
    (invalid builder input, connection failures, query and procedure
    failures, transaction guard violations). Builder validation errors are
    also ``ValueError`` instances.
"""

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
    # Helper functions
    connection_failed,
    invalid_argument,
    procedure_failed,
    query_failed,
    transaction_failed,
)

__all__ = [
    # Base Exception and Error Codes
    "DBLibError",
    "ErrorCode",
    # Taxonomy
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
    # Helper functions
    "invalid_argument",
    "connection_failed",
    "query_failed",
    "procedure_failed",
    "transaction_failed",
]
