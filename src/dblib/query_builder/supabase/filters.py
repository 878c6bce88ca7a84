"""Supabase (PostgreSQL) query builder.

Adds PostgreSQL-specific predicates (full-text search, PostGIS radius,
JSON and array operators) and RETURNING variants of the mutating
statements on top of the generic ``QueryBuilder``.
"""

import json
import math
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from dblib.common.exceptions import invalid_argument
from dblib.constants.sql import DEFAULT_TEXT_SEARCH_CONFIG, WILDCARD
from dblib.query_builder.base import ClauseState, QueryBuilder
from dblib.query_builder.sanitizer import placeholder_name, validate_text_search_config


def to_array_literal(values: Iterable[Any]) -> str:
    """PostgreSQL array literal text for ``values``.

    Each element is JSON-encoded, so strings are double-quoted and escaped:

        >>> to_array_literal(["a", "b"])
        '{"a","b"}'
        >>> to_array_literal([1, 2])
        '{1,2}'
    """
    return "{" + ",".join(json.dumps(value) for value in values) + "}"


class SupabaseQueryBuilder:
    """Query builder with Supabase/PostgreSQL extensions.

    Owns a ``QueryBuilder`` for the shared clause state and forwards every
    base operation to it, so fluent chains keep returning this builder:

        >>> builder = SupabaseQueryBuilder("posts")
        >>> builder.where("published", "=", True).where_ilike("title", "%sql%").build_select()
        'SELECT * FROM posts WHERE published = :published_0 AND title ILIKE :title_ilike_1'

    All placeholder names stay unique within one builder as long as
    ``reset()`` is called between independent statements.
    """

    def __init__(
        self,
        table: str,
        strict_identifiers: bool = False,
        text_search_config: str = DEFAULT_TEXT_SEARCH_CONFIG,
    ):
        """Initialize builder for ``table``.

        Args:
            table: Target table
            strict_identifiers: Reject identifiers with disallowed characters
            text_search_config: PostgreSQL text search configuration used by
                ``full_text_search``
        """
        self._builder = QueryBuilder(table, strict_identifiers=strict_identifiers)
        self._text_search_config = validate_text_search_config(text_search_config)

    @property
    def base(self) -> QueryBuilder:
        """The underlying generic builder."""
        return self._builder

    @property
    def table(self) -> str:
        return self._builder.table

    @property
    def state(self) -> ClauseState:
        return self._builder.state

    @property
    def text_search_config(self) -> str:
        return self._text_search_config

    # Base operations

    def select(self, columns: Iterable[str]) -> "SupabaseQueryBuilder":
        self._builder.select(columns)
        return self

    def where(self, column: str, operator: str, value: Any = None) -> "SupabaseQueryBuilder":
        self._builder.where(column, operator, value)
        return self

    def where_in(self, column: str, values: Sequence[Any]) -> "SupabaseQueryBuilder":
        self._builder.where_in(column, values)
        return self

    def join(self, table: str, condition: str, join_type: str = "INNER") -> "SupabaseQueryBuilder":
        self._builder.join(table, condition, join_type)
        return self

    def order_by(self, column: str, direction: str = "ASC") -> "SupabaseQueryBuilder":
        self._builder.order_by(column, direction)
        return self

    def group_by(self, column: str) -> "SupabaseQueryBuilder":
        self._builder.group_by(column)
        return self

    def limit(self, limit: int) -> "SupabaseQueryBuilder":
        self._builder.limit(limit)
        return self

    def offset(self, offset: int) -> "SupabaseQueryBuilder":
        self._builder.offset(offset)
        return self

    def build_select(self) -> str:
        return self._builder.build_select()

    def build_insert(self, data: Mapping[str, Any]) -> str:
        return self._builder.build_insert(data)

    def build_update(self, data: Mapping[str, Any]) -> str:
        return self._builder.build_update(data)

    def build_delete(self) -> str:
        return self._builder.build_delete()

    def get_params(self) -> Dict[str, Any]:
        return self._builder.get_params()

    def reset(self) -> "SupabaseQueryBuilder":
        self._builder.reset()
        return self

    # Supabase filters

    def _column(self, column: str) -> tuple:
        sanitized = self._builder.sanitize_column(column)
        return sanitized, placeholder_name(sanitized)

    def full_text_search(self, column: str, term: str) -> "SupabaseQueryBuilder":
        """Match ``column`` against ``term`` with PostgreSQL full-text search."""
        sanitized, stem = self._column(column)
        name = self._builder.next_placeholder(stem, "fts")
        config = self._text_search_config

        self._builder.add_predicate(
            f"to_tsvector('{config}', {sanitized}) @@ plainto_tsquery('{config}', :{name})",
            [(name, term)],
        )
        return self

    def within_radius(
        self,
        lat_column: str,
        lng_column: str,
        lat: float,
        lng: float,
        radius_km: float,
    ) -> "SupabaseQueryBuilder":
        """Keep rows whose (lat, lng) columns lie within ``radius_km`` of a point.

        Uses PostGIS ``ST_DWithin`` on geography points; the radius is
        converted to meters in SQL and rendered as a numeric literal.
        """
        lat_sanitized = self._builder.sanitize_column(lat_column)
        lng_sanitized = self._builder.sanitize_column(lng_column)
        radius = self._radius(radius_km)

        lat_name = self._builder.next_placeholder("lat")
        lng_name = self._builder.next_placeholder("lng")

        self._builder.add_predicate(
            f"ST_DWithin(ST_Point({lng_sanitized}, {lat_sanitized})::geography, "
            f"ST_Point(:{lng_name}, :{lat_name})::geography, {radius!r} * 1000)",
            [(lat_name, lat), (lng_name, lng)],
        )
        return self

    @staticmethod
    def _radius(radius_km: Any) -> float:
        try:
            radius = float(radius_km)
        except (TypeError, ValueError):
            raise invalid_argument("Radius must be a number", field="radius_km", value=radius_km)
        if isinstance(radius_km, bool) or not math.isfinite(radius) or radius < 0:
            raise invalid_argument(
                "Radius must be a finite non-negative number", field="radius_km", value=radius_km
            )
        return radius

    def where_json_contains(self, column: str, key: str, value: Any) -> "SupabaseQueryBuilder":
        """Compare the text of JSON field ``key`` in ``column`` to ``value``.

        Both the key and the value are bound as parameters.
        """
        sanitized, stem = self._column(column)
        key_name = self._builder.next_placeholder(stem, "json_key")
        value_name = self._builder.next_placeholder(stem, "json")

        self._builder.add_predicate(
            f"{sanitized} ->> :{key_name} = :{value_name}",
            [(key_name, key), (value_name, value)],
        )
        return self

    def where_json_array_contains(self, column: str, value: Any) -> "SupabaseQueryBuilder":
        """JSON containment (``@>``); ``value`` is bound as JSON text."""
        sanitized, stem = self._column(column)
        name = self._builder.next_placeholder(stem, "json_array")

        self._builder.add_predicate(f"{sanitized} @> :{name}", [(name, json.dumps(value))])
        return self

    def where_ilike(self, column: str, pattern: str) -> "SupabaseQueryBuilder":
        """Case-insensitive match; ``pattern`` carries its own ``%``/``_`` wildcards."""
        sanitized, stem = self._column(column)
        name = self._builder.next_placeholder(stem, "ilike")

        self._builder.add_predicate(f"{sanitized} ILIKE :{name}", [(name, pattern)])
        return self

    def where_array_overlaps(self, column: str, values: Iterable[Any]) -> "SupabaseQueryBuilder":
        """Array overlap (``&&``); ``values`` is bound as an array literal."""
        sanitized, stem = self._column(column)
        if isinstance(values, (str, bytes, Mapping)) or not isinstance(values, Iterable):
            raise invalid_argument(
                f"Array overlap on '{column}' needs a sequence of values", field="values", value=values
            )
        name = self._builder.next_placeholder(stem, "overlap")

        self._builder.add_predicate(f"{sanitized} && :{name}", [(name, to_array_literal(values))])
        return self

    # RETURNING variants

    def _returning_clause(self, returning_columns: Optional[Iterable[str]]) -> str:
        columns = self._builder.sanitize_columns(returning_columns or [WILDCARD])
        return " RETURNING " + ", ".join(columns)

    def build_insert_with_returning(
        self, data: Mapping[str, Any], returning_columns: Optional[Iterable[str]] = None
    ) -> str:
        returning = self._returning_clause(returning_columns)
        return self._builder.build_insert(data) + returning

    def build_update_with_returning(
        self, data: Mapping[str, Any], returning_columns: Optional[Iterable[str]] = None
    ) -> str:
        returning = self._returning_clause(returning_columns)
        return self._builder.build_update(data) + returning

    def build_delete_with_returning(self, returning_columns: Optional[Iterable[str]] = None) -> str:
        returning = self._returning_clause(returning_columns)
        return self._builder.build_delete() + returning

    def build_select_with_supabase_filters(self) -> str:
        """SELECT with backend row-filtering policy applied.

        No policy rewriting is applied yet, so this renders the same SQL as
        ``build_select()``.
        """
        return self._builder.build_select()
