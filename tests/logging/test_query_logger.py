"""Tests for QueryLogger and setup_logging."""

import json
import logging
import logging.handlers

import pytest
from unittest.mock import Mock

from dblib.common.exceptions import QueryFailedError
from dblib.logging import CustomJsonFormatter, QueryLogger, setup_logging
from dblib.settings import LoggingSettings


@pytest.fixture
def stdlib_logger():
    return Mock(spec=logging.Logger)


@pytest.fixture(autouse=True)
def restore_queries_logger():
    logger = logging.getLogger("dblib.queries")
    handlers, level = list(logger.handlers), logger.level
    yield
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers = handlers
    logger.setLevel(level)


def _context(call):
    return call.kwargs["extra"]["context"]


class TestQueryLogger:

    def test_defaults(self):
        logger = QueryLogger()

        assert logger.enabled
        assert logger.level == "INFO"
        assert logger.log_file is None
        assert logger.log_size == 0

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            QueryLogger(level="chatty")

    def test_level_threshold(self, stdlib_logger):
        logger = QueryLogger(stdlib_logger, level="warning")

        logger.info("ignored")
        logger.debug("ignored")
        logger.error("kept", {"a": 1})

        stdlib_logger.log.assert_called_once_with(logging.ERROR, "kept", extra={"context": {"a": 1}})

    def test_disabled_logger_emits_nothing(self, stdlib_logger):
        logger = QueryLogger(stdlib_logger, enabled=False)

        logger.critical("ignored")
        logger.log_query("SELECT 1")

        stdlib_logger.log.assert_not_called()

    def test_log_query(self, stdlib_logger):
        QueryLogger(stdlib_logger).log_query("SELECT * FROM users WHERE id = :id_0", {"id_0": 5}, 1.234)

        call = stdlib_logger.log.call_args
        assert call.args == (logging.INFO, "Query executed")
        assert _context(call) == {
            "query": "SELECT * FROM users WHERE id = :id_0",
            "params": {"id_0": 5},
            "execution_time": "1.23ms",
        }

    def test_log_query_positional_params(self, stdlib_logger):
        QueryLogger(stdlib_logger).log_query("CALL refresh", (1, 2))

        assert _context(stdlib_logger.log.call_args)["params"] == [1, 2]

    def test_log_query_truncates_sql(self, stdlib_logger):
        QueryLogger(stdlib_logger).log_query("SELECT " + "x" * 1000)

        assert len(_context(stdlib_logger.log.call_args)["query"]) == 500

    def test_log_connection_and_transaction(self, stdlib_logger):
        logger = QueryLogger(stdlib_logger)

        logger.log_connection("established", {"host": "db"})
        logger.log_transaction("rolled back")

        messages = [call.args[1] for call in stdlib_logger.log.call_args_list]
        assert messages == ["Database connection established", "Transaction rolled back"]

    def test_log_error(self, stdlib_logger):
        try:
            raise QueryFailedError("Query failed")
        except QueryFailedError as exc:
            QueryLogger(stdlib_logger).log_error("Query execution failed", exc, {"query": "SELECT"})

        call = stdlib_logger.log.call_args
        context = _context(call)
        assert call.args == (logging.ERROR, "Query execution failed")
        assert context["query"] == "SELECT"
        assert context["error_type"] == "QueryFailedError"
        assert context["code"] == "EXECUTION_002"
        assert context["file"].endswith("test_query_logger.py")
        assert isinstance(context["line"], int)

    def test_log_error_for_plain_exception(self, stdlib_logger):
        QueryLogger(stdlib_logger).log_error("failed", RuntimeError("boom"))

        context = _context(stdlib_logger.log.call_args)
        assert context["error"] == "boom"
        assert context["code"] is None
        assert "file" not in context

    def test_from_settings(self, tmp_path):
        log_file = str(tmp_path / "db.log")

        logger = QueryLogger.from_settings(LoggingSettings(level="error", file=log_file, enabled=False))

        assert logger.level == "ERROR"
        assert logger.log_file == log_file
        assert not logger.enabled
        assert logging.getLogger("dblib.queries").level == logging.ERROR

    def test_from_settings_writes_rotating_file(self, tmp_path):
        log_file = tmp_path / "db.log"
        logger = QueryLogger.from_settings(LoggingSettings(file=str(log_file), max_size=200, max_files=2))

        for index in range(20):
            logger.log_query("SELECT * FROM users WHERE id = :id_0", {"id_0": index}, 1.5)

        rotating = [
            h for h in logging.getLogger("dblib.queries").handlers
            if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(rotating) == 1
        assert rotating[0].maxBytes == 200
        assert rotating[0].backupCount == 2

        assert log_file.exists()
        assert (tmp_path / "db.log.1").exists()
        assert (tmp_path / "db.log.2").exists()
        assert not (tmp_path / "db.log.3").exists()
        assert logger.log_size > 0

        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert entry["message"] == "Query executed"
        assert entry["level"] == "INFO"
        assert entry["context"]["params"] == {"id_0": 19}

    def test_from_settings_reuses_file_handler(self, tmp_path):
        settings = LoggingSettings(file=str(tmp_path / "db.log"))

        QueryLogger.from_settings(settings)
        QueryLogger.from_settings(settings)

        handlers = logging.getLogger("dblib.queries").handlers
        assert len([h for h in handlers if isinstance(h, logging.handlers.RotatingFileHandler)]) == 1

    def test_from_settings_without_file(self):
        logger = QueryLogger.from_settings(LoggingSettings(file=""))

        assert logger.log_file is None
        assert not any(
            isinstance(h, logging.handlers.RotatingFileHandler)
            for h in logging.getLogger("dblib.queries").handlers
        )

    def test_log_size(self, tmp_path):
        log_file = tmp_path / "database.log"
        log_file.write_text("x" * 42)

        assert QueryLogger(log_file=str(log_file)).log_size == 42


class TestSetupLogging:

    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers = handlers
        root.setLevel(level)

    def test_console_only(self):
        setup_logging(level="warning")
        root = logging.getLogger()

        assert root.level == logging.WARNING
        assert any(isinstance(h.formatter, CustomJsonFormatter) for h in root.handlers)

    def test_rotating_file(self, tmp_path):
        log_file = tmp_path / "database.log"

        setup_logging(level="INFO", log_file=str(log_file), max_bytes=1024, backup_count=2)
        QueryLogger().log_transaction("started")

        rotating = [h for h in logging.getLogger().handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert rotating[0].maxBytes == 1024
        assert rotating[0].backupCount == 2
        for handler in rotating:
            handler.flush()

        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert entry["message"] == "Transaction started"
        assert entry["level"] == "INFO"
        assert entry["sdk_name"] == "dblib"
        assert entry["context"] == {}
