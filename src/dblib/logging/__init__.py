"""Logging infrastructure for dblib.

This module provides structured logging with JSON output, context tracking,
size-based file rotation and the ``QueryLogger`` collaborator used by
``DatabaseManager``.
"""

from dblib.logging.filters import ContextFilter
from dblib.logging.logger import (
    CustomJsonFormatter,
    add_rotating_file_handler,
    get_logger,
    setup_logging,
)
from dblib.logging.query_logger import QueryLogger

__all__ = [
    "get_logger",
    "setup_logging",
    "add_rotating_file_handler",
    "CustomJsonFormatter",
    "ContextFilter",
    "QueryLogger",
]
