"""Database connections.

``SupabaseConnection`` is the PostgreSQL/Supabase implementation of the
``DatabaseConnection`` protocol.
"""

from dblib.connection.supabase import SupabaseConnection
from dblib.connection.types import StatementResult

__all__ = [
    "SupabaseConnection",
    "StatementResult",
]
