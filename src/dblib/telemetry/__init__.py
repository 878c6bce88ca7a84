"""OpenTelemetry helpers for instrumentation."""

from typing import Optional

from opentelemetry import trace

from dblib.__version__ import __version__

__all__ = [
    "get_tracer",
]


def get_tracer(name: str, version: Optional[str] = None):
    """Return a tracer from the active OpenTelemetry provider.

    Without a configured provider this is the no-op tracer, so spans cost
    nothing unless the application installs an SDK.
    """
    return trace.get_tracer(name, version or __version__)
