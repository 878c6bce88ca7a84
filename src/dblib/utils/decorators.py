import functools
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar

from opentelemetry.trace import SpanKind, Status, StatusCode

from dblib.telemetry import get_tracer


F = TypeVar('F', bound=Callable[..., Any])
AttributeGetter = Callable[..., Optional[Mapping[str, Any]]]

logger = None


def _get_logger():
    """Get logger instance lazily."""
    global logger
    if logger is None:
        from dblib.logging import get_logger
        logger = get_logger(__name__)
    return logger


def _span_attributes(
    static: Optional[Mapping[str, Any]],
    getter: Optional[AttributeGetter],
    args: tuple,
    kwargs: dict,
) -> Dict[str, Any]:
    # OpenTelemetry rejects None attribute values
    merged: Dict[str, Any] = dict(static or {})
    if getter is not None:
        try:
            merged.update(getter(*args, **kwargs) or {})
        except Exception as exc:
            _get_logger().warning("trace attribute getter failed: %s", exc)
    return {key: value for key, value in merged.items() if value is not None}


def traced(
    span_name: Optional[str] = None,
    *,
    kind: SpanKind = SpanKind.CLIENT,
    attributes: Optional[Mapping[str, Any]] = None,
    attribute_getter: Optional[AttributeGetter] = None,
) -> Callable[[F], F]:
    """Run each call of the decorated function inside an OpenTelemetry span.

    A failing call has its exception recorded on the span and the span
    status set to ERROR; the exception itself propagates unchanged.

    Args:
        span_name: Span name. Defaults to the module-qualified function name.
        kind: Span kind, CLIENT since the wrapped calls talk to the database.
        attributes: Static span attributes.
        attribute_getter: Called with the same arguments as the function;
            returns per-call attributes such as the SQL statement.

    Example:
        >>> @traced("dblib.read", attributes={"db.system": "postgresql"})
        ... def read(self, query, params=None):
        ...     ...
    """

    def decorator(func: F) -> F:
        name = span_name or f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            tracer = get_tracer(func.__module__)

            with tracer.start_as_current_span(name, kind=kind) as span:
                for key, value in _span_attributes(attributes, attribute_getter, args, kwargs).items():
                    span.set_attribute(key, value)

                try:
                    return func(*args, **kwargs)
                except Exception as exc:
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, str(exc)))
                    raise

        return wrapper  # type: ignore[return-value]

    return decorator
