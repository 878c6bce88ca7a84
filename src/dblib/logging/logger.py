"""Core logging setup and configuration.

Records are rendered as one JSON object per line by ``CustomJsonFormatter``
and enriched by ``ContextFilter``. Handlers are configured declaratively
through ``logging.config.dictConfig`` in ``setup_logging``.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional, Set

from opentelemetry import trace

from dblib.logging.filters import ContextFilter


def _standard_record_attributes() -> Set[str]:
    """Attributes every ``LogRecord`` has; everything else came in via ``extra``."""
    sample = logging.LogRecord(
        name="dblib.sample",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg="",
        args=(),
        exc_info=None,
    )
    standard = set(sample.__dict__.keys())
    standard.update({"asctime", "message"})
    return standard


_STANDARD_ATTRIBUTES = _standard_record_attributes()


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class CustomJsonFormatter(logging.Formatter):
    """JSON formatter for database activity records.

    ``extra`` values (the ``context`` mapping written by ``QueryLogger``,
    the ``error_code`` of a ``DBLibError``, filter-injected request data)
    are emitted as top-level keys next to timestamp, level, logger and
    message. Records written while a ``traced`` database call is running
    carry that span's trace and span ids.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRIBUTES
        }
        entry.update(
            timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            level=record.levelname,
            logger=record.name,
            message=record.getMessage(),
        )

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            entry["trace_id"] = format(span_context.trace_id, "032x")
            entry["span_id"] = format(span_context.span_id, "016x")

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Configure structured logging backed by ``logging.config.dictConfig``.

    Console output is always configured. When ``log_file`` is given a
    size-rotating file handler is added next to it, keeping at most
    ``backup_count`` rotated files of ``max_bytes`` each.

    Args:
        level: Base log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path of the rotating log file.
        max_bytes: Rotation threshold in bytes.
        backup_count: Number of rotated files to keep.
    """
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level.upper(),
            "formatter": "dblib_json",
            "filters": ["dblib_context"],
            "stream": "ext://sys.stdout",
        }
    }

    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level.upper(),
            "formatter": "dblib_json",
            "filters": ["dblib_context"],
            "filename": log_file,
            "maxBytes": max_bytes,
            "backupCount": backup_count,
            "encoding": "utf-8",
        }

    config_dict: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "dblib_json": {
                "()": "dblib.logging.logger.CustomJsonFormatter",
            }
        },
        "filters": {
            "dblib_context": {
                "()": "dblib.logging.filters.ContextFilter",
            }
        },
        "handlers": handlers,
        "root": {
            "level": level.upper(),
            "handlers": list(handlers),
        },
    }

    logging.config.dictConfig(config_dict)


def add_rotating_file_handler(
    logger: logging.Logger,
    log_file: str,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> RotatingFileHandler:
    """Attach a JSON ``RotatingFileHandler`` for ``log_file`` to ``logger``.

    A logger already writing to the same path keeps its handler, with the
    rotation limits updated, so repeated calls never duplicate entries.
    """
    path = os.path.abspath(log_file)
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == path:
            handler.maxBytes = max_bytes
            handler.backupCount = backup_count
            return handler

    handler = RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(CustomJsonFormatter())
    handler.addFilter(ContextFilter())
    logger.addHandler(handler)
    return handler
