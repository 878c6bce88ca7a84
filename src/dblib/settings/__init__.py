"""Settings module providing configuration management for dblib.

Built on Pydantic Settings. Each concern has its own file and its own
environment variable prefix:

    - database.py: connection parameters (``DB_`` prefix)
    - logging.py: log level, file and rotation (``LOG_`` prefix)
    - main.py: ``_Settings`` aggregating both, ``get_settings()`` singleton

Configuration Sources (precedence order):
    1. Explicit constructor arguments
    2. Environment Variables
    3. ``.env`` file
    4. Default Values in code

Quick Start:
    >>> from dblib.settings import get_settings
    >>> settings = get_settings()
    >>> settings.database.host
    'localhost'
"""

from .main import _Settings, get_settings, _reload_settings
from .base import DBLibBaseSettings
from .database import DatabaseSettings
from .logging import LoggingSettings

__all__ = [
    "get_settings",
    "DatabaseSettings",
    "LoggingSettings",
]
