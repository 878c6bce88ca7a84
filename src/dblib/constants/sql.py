"""SQL and query-related constants.

This module contains the allow-lists and enums shared by the query
builders, the connection layer and the manager.

These constants sit at the bottom of the package so any module can import
them without creating circular dependencies.
"""

from enum import Enum


class QueryType(str, Enum):
    """SQL statement type enumeration.

    Used to tag log entries and telemetry spans with the kind of statement
    the manager executed.
    """

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    CALL = "CALL"
    EXECUTE_SQL = "EXECUTE_SQL"


class JoinType(str, Enum):
    """Join types accepted by ``QueryBuilder.join``."""

    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    FULL_OUTER = "FULL OUTER"


class OrderDirection(str, Enum):
    """Sort directions accepted by ``QueryBuilder.order_by``."""

    ASC = "ASC"
    DESC = "DESC"


ALLOWED_OPERATORS = (
    "=",
    "!=",
    "<",
    ">",
    "<=",
    ">=",
    "LIKE",
    "ILIKE",
    "IN",
    "NOT IN",
    "IS NULL",
    "IS NOT NULL",
)

# Operators that take no right-hand operand
NULL_OPERATORS = ("IS NULL", "IS NOT NULL")

# Operators whose operand is a list of values
LIST_OPERATORS = ("IN", "NOT IN")

ALLOWED_JOIN_TYPES = tuple(join_type.value for join_type in JoinType)
ALLOWED_ORDER_DIRECTIONS = tuple(direction.value for direction in OrderDirection)

# Characters kept by the identifier sanitizer
IDENTIFIER_DISALLOWED_PATTERN = r"[^A-Za-z0-9_.]"

# identifier operator identifier, nothing else
JOIN_CONDITION_PATTERN = (
    r"^[A-Za-z_][A-Za-z0-9_.]*\s*(?:=|!=|<>|<=|>=|<|>)\s*[A-Za-z_][A-Za-z0-9_.]*$"
)

WILDCARD = "*"

DEFAULT_TEXT_SEARCH_CONFIG = "spanish"
TEXT_SEARCH_CONFIG_PATTERN = r"^[a-z_]+$"

# Longest SQL text kept in error details and log entries
MAX_LOGGED_QUERY_LENGTH = 500
