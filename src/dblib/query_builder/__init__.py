"""Query builder module for parameterized SQL generation.

Query builders accumulate clauses and render SQL text plus a parameter
map. They do NOT execute queries - that is handled by the connection and
the ``DatabaseManager``.

Architecture:
    - sanitizer.py: identifier sanitization and allow-list validation
    - base.py: ``ClauseState`` accumulator and the generic ``QueryBuilder``
    - supabase/: ``SupabaseQueryBuilder``, which owns a ``QueryBuilder`` and
      adds PostgreSQL filters and RETURNING statements

Design Principles:
    1. **SQL Generation Only**: Builders only produce SQL strings and parameters
    2. **Values Are Always Bound**: Values become ``:placeholders``, never literals
    3. **Fail Early**: Bad identifiers, operators, join types and directions
       raise at the call that introduces them
    4. **Explicit Reset**: Clauses persist across ``build_*`` calls until ``reset()``

Example:
    >>> from dblib.query_builder import QueryBuilder
    >>> builder = QueryBuilder("users")
    >>> builder.select(["id", "email"]).where("status", "=", "active").limit(10)
    >>> builder.build_select()
    'SELECT id, email FROM users WHERE status = :status_0 LIMIT 10'
    >>> builder.get_params()
    {'status_0': 'active'}
"""

from dblib.query_builder.base import ClauseState, QueryBuilder
from dblib.query_builder.sanitizer import (
    placeholder_name,
    sanitize_identifier,
    validate_direction,
    validate_join_condition,
    validate_join_type,
    validate_operator,
)
from dblib.query_builder.supabase.filters import SupabaseQueryBuilder

__all__ = [
    "ClauseState",
    "QueryBuilder",
    "SupabaseQueryBuilder",
    "sanitize_identifier",
    "placeholder_name",
    "validate_operator",
    "validate_join_type",
    "validate_direction",
    "validate_join_condition",
]
