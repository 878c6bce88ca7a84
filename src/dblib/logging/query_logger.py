"""Structured log entries for database activity.

``QueryLogger`` is the logging collaborator handed to ``DatabaseManager``.
It turns query, connection, transaction and error events into level-tagged
records on a stdlib logger. ``from_settings`` also gives that logger its
level and the size-rotating JSON log file named by ``LoggingSettings``;
application-wide handlers are configured through ``setup_logging``.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Sequence, Union

from dblib.constants.sql import MAX_LOGGED_QUERY_LENGTH
from dblib.logging.logger import add_rotating_file_handler, get_logger

if TYPE_CHECKING:
    from dblib.settings import LoggingSettings


_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class QueryLogger:
    """Level-filtered structured logger for database events.

    Emission goes through the stdlib logging machinery, which reports
    handler failures itself instead of raising into the caller.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        enabled: bool = True,
        level: str = "INFO",
        log_file: Optional[str] = None,
    ):
        level = level.upper()
        if level not in _LEVELS:
            raise ValueError(f"Invalid log level: {level}")

        self._logger = logger or get_logger("dblib.queries")
        self._enabled = enabled
        self._level = level
        self._log_file = log_file

    @classmethod
    def from_settings(cls, settings: "LoggingSettings") -> "QueryLogger":
        """Logger writing to ``settings.file``, rotated at ``max_size`` bytes
        with ``max_files`` backups kept.
        """
        logger = get_logger("dblib.queries")
        logger.setLevel(settings.level)
        if settings.file:
            add_rotating_file_handler(logger, settings.file, settings.max_size, settings.max_files)

        return cls(
            logger,
            enabled=settings.enabled,
            level=settings.level,
            log_file=settings.file,
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def level(self) -> str:
        return self._level

    @property
    def log_file(self) -> Optional[str]:
        return self._log_file

    @property
    def log_size(self) -> int:
        """Size in bytes of the log file, 0 when there is none yet."""
        if self._log_file and os.path.exists(self._log_file):
            return os.path.getsize(self._log_file)
        return 0

    def log(self, level: str, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
        level = level.upper()
        if not self._enabled or _LEVELS.index(level) < _LEVELS.index(self._level):
            return
        self._logger.log(getattr(logging, level), message, extra={"context": dict(context or {})})

    def debug(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
        self.log("DEBUG", message, context)

    def info(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
        self.log("INFO", message, context)

    def warning(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
        self.log("WARNING", message, context)

    def error(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
        self.log("ERROR", message, context)

    def critical(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
        self.log("CRITICAL", message, context)

    def log_query(
        self,
        query: str,
        params: Union[Mapping[str, Any], Sequence[Any], None] = None,
        execution_time_ms: Optional[float] = None,
    ) -> None:
        """Record an executed statement with its parameters and timing."""
        context: Dict[str, Any] = {
            "query": query[:MAX_LOGGED_QUERY_LENGTH],
            "params": dict(params) if isinstance(params, Mapping) else list(params or ()),
        }
        if execution_time_ms is not None:
            context["execution_time"] = f"{execution_time_ms:.2f}ms"
        self.info("Query executed", context)

    def log_connection(self, action: str, context: Optional[Mapping[str, Any]] = None) -> None:
        """Record ``established`` or ``closed``."""
        self.info(f"Database connection {action}", context)

    def log_transaction(self, action: str, context: Optional[Mapping[str, Any]] = None) -> None:
        """Record ``started``, ``committed`` or ``rolled back``."""
        self.info(f"Transaction {action}", context)

    def log_error(
        self,
        message: str,
        error: BaseException,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Record a failure with its message, code and location."""
        entry: Dict[str, Any] = dict(context or {})
        entry.update(
            {
                "error": str(error),
                "error_type": type(error).__name__,
                "code": getattr(getattr(error, "error_code", None), "value", None),
            }
        )
        traceback = error.__traceback__
        if traceback is not None:
            while traceback.tb_next is not None:
                traceback = traceback.tb_next
            entry["file"] = traceback.tb_frame.f_code.co_filename
            entry["line"] = traceback.tb_lineno
        self.error(message, entry)
