import logging

from dblib.__version__ import __version__
from dblib.logging.filters import (
    ContextFilter,
    clear_request_context,
    set_logging_context,
    set_request_context,
)


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="dblib.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="sample",
        args=(),
        exc_info=None,
    )


def test_context_filter_adds_static_context():
    set_logging_context(application_name="billing", extra={"region": "eu-west"})
    try:
        record = _record()
        assert ContextFilter().filter(record)
        assert getattr(record, "application_name") == "billing"
        assert getattr(record, "region") == "eu-west"
    finally:
        set_logging_context()


def test_context_filter_uses_request_context():
    set_request_context(request_id="req-1", user_id="user-7")
    try:
        record = _record()
        assert ContextFilter().filter(record)
        assert record.request_id == "req-1"
        assert record.user_id == "user-7"
    finally:
        clear_request_context()


def test_context_filter_tags_sdk():
    record = _record()
    assert ContextFilter().filter(record)
    assert record.sdk_name == "dblib"
    assert record.core_version == __version__


def test_context_filter_no_config_is_graceful():
    set_logging_context()
    record = _record()
    assert ContextFilter().filter(record)
    assert not hasattr(record, "application_name")
    assert record.request_id is None
