"""Identifier sanitization and clause validation.

Every table, column, join target and procedure name that ends up in
rendered SQL passes through ``sanitize_identifier``. The sanitizer works
on an allow-list: characters outside ``[A-Za-z0-9_.]`` are stripped (or,
in strict mode, rejected), so an identifier can never carry quotes,
whitespace, comment markers or statement separators into a query.

Operators, join types and sort directions are checked against fixed
allow-lists and normalized to upper case. Join conditions get a structural
check instead of sanitization because they legitimately contain an
operator.
"""

import re

from dblib.common.exceptions import (
    InvalidIdentifierError,
    invalid_argument,
)
from dblib.constants.sql import (
    ALLOWED_JOIN_TYPES,
    ALLOWED_OPERATORS,
    ALLOWED_ORDER_DIRECTIONS,
    IDENTIFIER_DISALLOWED_PATTERN,
    JOIN_CONDITION_PATTERN,
    TEXT_SEARCH_CONFIG_PATTERN,
)

_DISALLOWED = re.compile(IDENTIFIER_DISALLOWED_PATTERN)
_JOIN_CONDITION = re.compile(JOIN_CONDITION_PATTERN)
_TEXT_SEARCH_CONFIG = re.compile(TEXT_SEARCH_CONFIG_PATTERN)


def sanitize_identifier(raw: str, strict: bool = False) -> str:
    """Reduce ``raw`` to a safe SQL identifier.

    Args:
        raw: Table, column or procedure name as supplied by the caller
        strict: Reject any disallowed character instead of stripping it

    Returns:
        The identifier with every character outside ``[A-Za-z0-9_.]`` removed

    Raises:
        InvalidIdentifierError: If the result is empty or starts with a digit,
            or if ``strict`` is set and ``raw`` contained a disallowed character

    Examples:
        >>> sanitize_identifier("users")
        'users'
        >>> sanitize_identifier("users; DROP TABLE users; --")
        'usersDROPTABLEusers'
    """
    if not isinstance(raw, str):
        raise invalid_argument(
            f"Invalid identifier: {raw!r}",
            field="identifier",
            value=raw,
            error_class=InvalidIdentifierError,
        )

    sanitized = _DISALLOWED.sub("", raw)

    if strict and sanitized != raw:
        raise invalid_argument(
            f"Invalid identifier: {raw}",
            field="identifier",
            value=raw,
            error_class=InvalidIdentifierError,
        )

    if not sanitized or sanitized[0].isdigit():
        raise invalid_argument(
            f"Invalid identifier: {raw}",
            field="identifier",
            value=raw,
            error_class=InvalidIdentifierError,
        )

    return sanitized


def placeholder_name(identifier: str) -> str:
    """Placeholder stem for a sanitized identifier.

    Bind names are ``\\w+`` only, so qualified names such as ``users.id``
    become ``users_id``.
    """
    return identifier.replace(".", "_")


def validate_operator(operator: str) -> str:
    """Return the upper-cased operator if it is on the allow-list.

    Raises:
        InvalidArgumentError: For any other operator
    """
    normalized = operator.upper() if isinstance(operator, str) else operator
    if normalized not in ALLOWED_OPERATORS:
        raise invalid_argument(f"Invalid operator: {operator}", field="operator", value=operator)
    return normalized


def validate_join_type(join_type: str) -> str:
    normalized = join_type.upper() if isinstance(join_type, str) else join_type
    if normalized not in ALLOWED_JOIN_TYPES:
        raise invalid_argument(f"Invalid join type: {join_type}", field="join_type", value=join_type)
    return normalized


def validate_direction(direction: str) -> str:
    normalized = direction.upper() if isinstance(direction, str) else direction
    if normalized not in ALLOWED_ORDER_DIRECTIONS:
        raise invalid_argument(
            f"Invalid order direction: {direction}", field="direction", value=direction
        )
    return normalized


def validate_join_condition(condition: str) -> str:
    """Accept only ``identifier operator identifier`` join conditions.

    This is a conservative structural check, not an expression parser:
    ``users.id = orders.user_id`` passes, anything with extra tokens,
    quotes, parentheses or keywords is rejected.

    Raises:
        InvalidArgumentError: If the condition does not match
    """
    if not isinstance(condition, str) or not _JOIN_CONDITION.fullmatch(condition):
        raise invalid_argument(
            f"Invalid join condition: {condition}", field="condition", value=condition
        )
    return condition


def validate_text_search_config(config: str) -> str:
    """Text search configurations are rendered as literals; keep them plain."""
    if not isinstance(config, str) or not _TEXT_SEARCH_CONFIG.fullmatch(config):
        raise invalid_argument(
            f"Invalid text search configuration: {config}", field="config", value=config
        )
    return config
