"""Constants shared across dblib."""

from dblib.constants.sql import (
    ALLOWED_JOIN_TYPES,
    ALLOWED_OPERATORS,
    ALLOWED_ORDER_DIRECTIONS,
    DEFAULT_TEXT_SEARCH_CONFIG,
    IDENTIFIER_DISALLOWED_PATTERN,
    JOIN_CONDITION_PATTERN,
    LIST_OPERATORS,
    MAX_LOGGED_QUERY_LENGTH,
    NULL_OPERATORS,
    TEXT_SEARCH_CONFIG_PATTERN,
    WILDCARD,
    JoinType,
    OrderDirection,
    QueryType,
)

__all__ = [
    "QueryType",
    "JoinType",
    "OrderDirection",
    "ALLOWED_OPERATORS",
    "NULL_OPERATORS",
    "LIST_OPERATORS",
    "ALLOWED_JOIN_TYPES",
    "ALLOWED_ORDER_DIRECTIONS",
    "IDENTIFIER_DISALLOWED_PATTERN",
    "JOIN_CONDITION_PATTERN",
    "WILDCARD",
    "DEFAULT_TEXT_SEARCH_CONFIG",
    "TEXT_SEARCH_CONFIG_PATTERN",
    "MAX_LOGGED_QUERY_LENGTH",
]
