from enum import Enum
from typing import Any, Dict, Optional

from dblib.constants.sql import MAX_LOGGED_QUERY_LENGTH


class ErrorCode(Enum):
    """Standard error codes for dblib operations.

    Each category has its own prefix so an error can be identified from
    logs without inspecting the exception class.

    Attributes:
        CONFIG_*: Configuration-related errors
        VALIDATION_*: Builder input validation errors
        CONNECTION_*: Connection lifecycle errors
        EXECUTION_*: Statement and procedure execution errors
        TRANSACTION_*: Transaction guard violations and failures
    """
    # Configuration errors
    CONFIG_ERROR = "CONFIG_001"
    CONFIG_MISSING = "CONFIG_002"
    CONFIG_INVALID = "CONFIG_003"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_001"
    INVALID_ARGUMENT = "VALIDATION_002"
    MISSING_PARAMETER = "VALIDATION_003"
    INVALID_IDENTIFIER = "VALIDATION_004"
    PLACEHOLDER_COLLISION = "VALIDATION_005"

    # Connection errors
    CONNECTION_ERROR = "CONNECTION_001"
    AUTH_ERROR = "CONNECTION_002"
    TIMEOUT_ERROR = "CONNECTION_003"
    NO_CONNECTION = "CONNECTION_004"

    # Execution errors
    EXECUTION_ERROR = "EXECUTION_001"
    QUERY_EXECUTION_ERROR = "EXECUTION_002"
    PROCEDURE_EXECUTION_ERROR = "EXECUTION_006"

    # Transaction errors
    TRANSACTION_ERROR = "TRANSACTION_001"
    TRANSACTION_ALREADY_ACTIVE = "TRANSACTION_002"
    NO_ACTIVE_TRANSACTION = "TRANSACTION_003"


class DBLibError(Exception):
    """Base exception for all dblib errors.

    Subclasses pin the error code for each kind of failure so callers can
    catch by class, while logs and serialized errors carry the code.

    Attributes:
        message: Error message
        error_code: Error code from ErrorCode enum
        details: Additional error details
        cause: Optional underlying exception
    """

    default_code: ErrorCode = ErrorCode.EXECUTION_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        """Initialize dblib error.

        Args:
            message: Error message
            error_code: Error code, defaults to the class code
            details: Additional error details
            cause: Optional underlying exception
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}
        self.cause = cause

        # Lazy import to avoid circular dependency
        from dblib.logging import get_logger
        logger = get_logger(__name__)
        logger.debug(
            message,
            extra={"error_code": self.error_code.value, "details": self.details},
        )

    def __str__(self) -> str:
        """String representation of the error."""
        msg = f"[{self.error_code.value}] {self.message}"
        if self.cause:
            msg = f"{msg} (caused by: {type(self.cause).__name__}: {str(self.cause)})"
        return msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
        }


class InvalidArgumentError(DBLibError, ValueError):
    """Builder input rejected before it could reach the database."""

    default_code = ErrorCode.INVALID_ARGUMENT


class InvalidIdentifierError(InvalidArgumentError):
    """Table, column or procedure name failed sanitization."""

    default_code = ErrorCode.INVALID_IDENTIFIER


class PlaceholderCollisionError(InvalidArgumentError):
    """A placeholder name is already bound on the builder."""

    default_code = ErrorCode.PLACEHOLDER_COLLISION


class ConfigurationError(DBLibError):
    default_code = ErrorCode.CONFIG_INVALID


class ConnectionFailedError(DBLibError):
    default_code = ErrorCode.CONNECTION_ERROR


class NoConnectionError(DBLibError):
    default_code = ErrorCode.NO_CONNECTION


class QueryFailedError(DBLibError):
    default_code = ErrorCode.QUERY_EXECUTION_ERROR


class ProcedureFailedError(DBLibError):
    default_code = ErrorCode.PROCEDURE_EXECUTION_ERROR


class TransactionFailedError(DBLibError):
    default_code = ErrorCode.TRANSACTION_ERROR


class TransactionAlreadyActiveError(DBLibError):
    default_code = ErrorCode.TRANSACTION_ALREADY_ACTIVE


class NoActiveTransactionError(DBLibError):
    default_code = ErrorCode.NO_ACTIVE_TRANSACTION


def _truncate_query(query: str) -> str:
    # Long statements are cut to keep log lines and error payloads bounded
    if len(query) > MAX_LOGGED_QUERY_LENGTH:
        return query[:MAX_LOGGED_QUERY_LENGTH] + "..."
    return query


# Helper functions for common error scenarios
def invalid_argument(
    message: str,
    field: Optional[str] = None,
    value: Any = None,
    error_class: type = InvalidArgumentError,
) -> InvalidArgumentError:
    """Create a validation error for rejected builder input.

    Args:
        message: Error message
        field: Argument that failed validation
        value: Rejected value
        error_class: InvalidArgumentError or one of its subclasses

    Returns:
        Instance of ``error_class``
    """
    details: Dict[str, Any] = {}
    if field:
        details["field"] = field
    if value is not None:
        details["value"] = str(value)
    return error_class(message, details=details)


def connection_failed(
    original_error: Exception,
    host: Optional[str] = None,
    database: Optional[str] = None,
) -> ConnectionFailedError:
    """Create a connection error.

    Args:
        original_error: The underlying driver exception
        host: Host that failed
        database: Database that failed

    Returns:
        ConnectionFailedError wrapping the driver error
    """
    details: Dict[str, Any] = {}
    if host:
        details["host"] = host
    if database:
        details["database"] = database

    return ConnectionFailedError(
        f"Connection failed: {original_error}",
        details=details,
        cause=original_error,
    )


def query_failed(query: str, original_error: Exception) -> QueryFailedError:
    """Create a query execution error.

    Args:
        query: SQL text that failed
        original_error: The underlying driver exception

    Returns:
        QueryFailedError carrying the (truncated) SQL text
    """
    query = _truncate_query(query)
    return QueryFailedError(
        f"Query failed '{query}': {original_error}",
        details={"query": query},
        cause=original_error,
    )


def procedure_failed(procedure: str, original_error: Exception) -> ProcedureFailedError:
    """Create a stored procedure error.

    Args:
        procedure: Procedure name
        original_error: The underlying driver exception

    Returns:
        ProcedureFailedError carrying the procedure name
    """
    return ProcedureFailedError(
        f"Procedure failed '{procedure}': {original_error}",
        details={"procedure": procedure},
        cause=original_error,
    )


def transaction_failed(action: str, original_error: Exception) -> TransactionFailedError:
    """Create a transaction error for a failed begin/commit/rollback.

    Args:
        action: ``begin``, ``commit`` or ``rollback``
        original_error: The underlying driver exception

    Returns:
        TransactionFailedError
    """
    return TransactionFailedError(
        f"Transaction failed: {action}: {original_error}",
        details={"action": action},
        cause=original_error,
    )
