from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from dblib.common.exceptions import (
    PlaceholderCollisionError,
    invalid_argument,
)
from dblib.constants.sql import LIST_OPERATORS, NULL_OPERATORS, WILDCARD
from dblib.query_builder.sanitizer import (
    placeholder_name,
    sanitize_identifier,
    validate_direction,
    validate_join_condition,
    validate_join_type,
    validate_operator,
)


@dataclass
class ClauseState:
    """Clause accumulator for one statement under construction.

    Holds the rendered fragments and the placeholder -> value map. The
    table is fixed for the lifetime of the state; ``QueryBuilder.reset``
    replaces the whole state instead of clearing it.
    """

    table: str
    select_columns: List[str] = field(default_factory=lambda: [WILDCARD])
    predicates: List[str] = field(default_factory=list)
    join_clauses: List[str] = field(default_factory=list)
    order_clauses: List[str] = field(default_factory=list)
    group_columns: List[str] = field(default_factory=list)
    limit: Optional[int] = None
    offset: Optional[int] = None
    parameters: Dict[str, Any] = field(default_factory=dict)

    def next_placeholder(self, stem: str, suffix: str = "", index: int = 0) -> str:
        """Placeholder name unique within this statement.

        Names end with the parameter count at the time of the call (plus
        ``index`` for multi-value calls), so every call owns a disjoint
        numeric range.
        """
        middle = f"_{suffix}" if suffix else ""
        return f"{stem}{middle}_{len(self.parameters) + index}"

    def bind(self, bindings: Sequence[Tuple[str, Any]]) -> None:
        """Record values for new placeholders, all or nothing.

        Raises:
            PlaceholderCollisionError: If a name is already bound or repeats
                within ``bindings``; nothing is recorded in that case
        """
        seen = set()
        for name, _ in bindings:
            if name in self.parameters or name in seen:
                raise PlaceholderCollisionError(
                    f"Placeholder ':{name}' is already bound; call reset() between statements",
                    details={"placeholder": name},
                )
            seen.add(name)

        for name, value in bindings:
            self.parameters[name] = value

    def where_sql(self) -> str:
        if not self.predicates:
            return ""
        return " WHERE " + " AND ".join(self.predicates)

    def snapshot(self) -> "ClauseState":
        """Copy with independent containers, for inspection."""
        return ClauseState(
            table=self.table,
            select_columns=list(self.select_columns),
            predicates=list(self.predicates),
            join_clauses=list(self.join_clauses),
            order_clauses=list(self.order_clauses),
            group_columns=list(self.group_columns),
            limit=self.limit,
            offset=self.offset,
            parameters=dict(self.parameters),
        )


def _non_negative_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise invalid_argument(f"{name} must be a non-negative integer", field=name, value=value)
    return value


class QueryBuilder:
    """Fluent builder for parameterized SELECT/INSERT/UPDATE/DELETE statements.

    Values never enter the SQL text: every value is bound to a named
    ``:placeholder`` and collected in a parameter map read with
    ``get_params()`` after the ``build_*`` call. Identifiers are sanitized
    and operators, join types and directions are validated at the call that
    introduces them, so a bad argument fails immediately and leaves the
    builder untouched.

    Rendered placeholders use SQLAlchemy ``text()`` bind syntax, so the
    output can be executed directly:

        >>> builder = QueryBuilder("users").where("id", "=", 5)
        >>> builder.build_select()
        'SELECT * FROM users WHERE id = :id_0'
        >>> builder.get_params()
        {'id_0': 5}

    The builder is not thread-safe and keeps its clauses across ``build_*``
    calls; use ``reset()`` between independent statements.
    """

    def __init__(self, table: str, strict_identifiers: bool = False):
        """Initialize builder for ``table``.

        Args:
            table: Target table, sanitized once here
            strict_identifiers: Reject identifiers containing disallowed
                characters instead of stripping them
        """
        self._strict = strict_identifiers
        self._state = ClauseState(table=self._sanitize(table))

    @property
    def table(self) -> str:
        return self._state.table

    @property
    def state(self) -> ClauseState:
        """Snapshot of the accumulated clauses."""
        return self._state.snapshot()

    def _sanitize(self, identifier: str) -> str:
        return sanitize_identifier(identifier, strict=self._strict)

    def sanitize_column(self, column: str) -> str:
        return self._sanitize(column)

    def sanitize_columns(self, columns: Iterable[str]) -> List[str]:
        """Sanitize a column list, keeping ``*`` verbatim."""
        sanitized = [
            WILDCARD if column == WILDCARD else self._sanitize(column)
            for column in columns
        ]
        if not sanitized:
            raise invalid_argument("Column list must not be empty", field="columns")
        return sanitized

    def add_predicate(self, fragment: str, bindings: Sequence[Tuple[str, Any]] = ()) -> "QueryBuilder":
        """Append an already-validated WHERE fragment and bind its values.

        Used by the base filters and by dialect extensions. ``fragment``
        must reference exactly the placeholders named in ``bindings``.
        """
        self._state.bind(bindings)
        self._state.predicates.append(fragment)
        return self

    def next_placeholder(self, stem: str, suffix: str = "", index: int = 0) -> str:
        return self._state.next_placeholder(stem, suffix, index)

    def select(self, columns: Iterable[str]) -> "QueryBuilder":
        """Replace the select list."""
        self._state.select_columns = self.sanitize_columns(columns)
        return self

    def where(self, column: str, operator: str, value: Any = None) -> "QueryBuilder":
        """Add ``column <operator> :placeholder``, joined to others with AND.

        ``IS NULL`` and ``IS NOT NULL`` take no value and bind nothing.
        ``IN`` and ``NOT IN`` expect a non-empty sequence and bind one
        placeholder per element.
        """
        sanitized = self._sanitize(column)
        op = validate_operator(operator)
        stem = placeholder_name(sanitized)

        if op in NULL_OPERATORS:
            return self.add_predicate(f"{sanitized} {op}")

        if op in LIST_OPERATORS:
            names, bindings = self._list_bindings(stem, value, column)
            return self.add_predicate(f"{sanitized} {op} ({', '.join(names)})", bindings)

        name = self.next_placeholder(stem)
        return self.add_predicate(f"{sanitized} {op} :{name}", [(name, value)])

    def where_in(self, column: str, values: Sequence[Any]) -> "QueryBuilder":
        """Add ``column IN (:a, :b, ...)`` with one placeholder per value."""
        sanitized = self._sanitize(column)
        names, bindings = self._list_bindings(placeholder_name(sanitized), values, column)
        return self.add_predicate(f"{sanitized} IN ({', '.join(names)})", bindings)

    def _list_bindings(
        self, stem: str, values: Any, column: str
    ) -> Tuple[List[str], List[Tuple[str, Any]]]:
        if isinstance(values, (str, bytes, Mapping)) or not isinstance(values, Iterable):
            raise invalid_argument(
                f"IN filter on '{column}' needs a sequence of values", field="values", value=values
            )
        values = list(values)
        if not values:
            raise invalid_argument(f"IN filter on '{column}' needs at least one value", field="values")

        bindings = [
            (self.next_placeholder(stem, "in", index), value)
            for index, value in enumerate(values)
        ]
        return [f":{name}" for name, _ in bindings], bindings

    def join(self, table: str, condition: str, join_type: str = "INNER") -> "QueryBuilder":
        """Add ``<TYPE> JOIN <table> ON <condition>``.

        ``condition`` must look like ``identifier operator identifier``.
        """
        sanitized = self._sanitize(table)
        validated_type = validate_join_type(join_type)
        validated_condition = validate_join_condition(condition)

        self._state.join_clauses.append(f"{validated_type} JOIN {sanitized} ON {validated_condition}")
        return self

    def order_by(self, column: str, direction: str = "ASC") -> "QueryBuilder":
        sanitized = self._sanitize(column)
        validated_direction = validate_direction(direction)

        self._state.order_clauses.append(f"{sanitized} {validated_direction}")
        return self

    def group_by(self, column: str) -> "QueryBuilder":
        self._state.group_columns.append(self._sanitize(column))
        return self

    def limit(self, limit: int) -> "QueryBuilder":
        # Rendered as a literal; integer-only input keeps it injection-free
        self._state.limit = _non_negative_int(limit, "limit")
        return self

    def offset(self, offset: int) -> "QueryBuilder":
        self._state.offset = _non_negative_int(offset, "offset")
        return self

    def build_select(self) -> str:
        """Render the SELECT statement.

        Clause order is fixed: SELECT, FROM, JOIN, WHERE, GROUP BY,
        ORDER BY, LIMIT, OFFSET. Empty clauses are omitted.
        """
        state = self._state
        query = f"SELECT {', '.join(state.select_columns)} FROM {state.table}"

        if state.join_clauses:
            query += " " + " ".join(state.join_clauses)

        query += state.where_sql()

        if state.group_columns:
            query += " GROUP BY " + ", ".join(state.group_columns)

        if state.order_clauses:
            query += " ORDER BY " + ", ".join(state.order_clauses)

        if state.limit is not None:
            query += f" LIMIT {state.limit}"

        if state.offset is not None:
            query += f" OFFSET {state.offset}"

        return query

    def _data_bindings(self, data: Mapping[str, Any]) -> List[Tuple[str, str, Any]]:
        """(column, placeholder, value) for each key, in the caller's order."""
        if not data:
            raise invalid_argument("Data must contain at least one column", field="data")
        rows = []
        for column, value in data.items():
            sanitized = self._sanitize(column)
            rows.append((sanitized, placeholder_name(sanitized), value))
        return rows

    def build_insert(self, data: Mapping[str, Any]) -> str:
        """Render ``INSERT INTO t (a, b) VALUES (:a, :b)``.

        Placeholders are named after the columns, so building a second
        insert with the same columns requires ``reset()`` first.

        Raises:
            PlaceholderCollisionError: If a column placeholder is already bound
        """
        rows = self._data_bindings(data)
        self._state.bind([(name, value) for _, name, value in rows])

        columns = ", ".join(column for column, _, _ in rows)
        placeholders = ", ".join(f":{name}" for _, name, _ in rows)
        return f"INSERT INTO {self._state.table} ({columns}) VALUES ({placeholders})"

    def build_update(self, data: Mapping[str, Any]) -> str:
        """Render ``UPDATE t SET a = :a, ...`` plus any accumulated WHERE."""
        rows = self._data_bindings(data)
        self._state.bind([(name, value) for _, name, value in rows])

        assignments = ", ".join(f"{column} = :{name}" for column, name, _ in rows)
        return f"UPDATE {self._state.table} SET {assignments}{self._state.where_sql()}"

    def build_delete(self) -> str:
        return f"DELETE FROM {self._state.table}{self._state.where_sql()}"

    def get_params(self) -> Dict[str, Any]:
        """Placeholder -> value map; read it after the ``build_*`` call."""
        return dict(self._state.parameters)

    def reset(self) -> "QueryBuilder":
        """Start over with a fresh accumulator for the same table."""
        self._state = ClauseState(table=self._state.table)
        return self
