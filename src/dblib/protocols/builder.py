"""Capability protocol shared by the statement builders."""

from typing import Any, Dict, Iterable, Mapping, Protocol, Sequence, runtime_checkable


@runtime_checkable
class StatementBuilder(Protocol):
    """What every builder offers, whether base or dialect-extended.

    ``QueryBuilder`` implements it directly; ``SupabaseQueryBuilder`` owns a
    ``QueryBuilder`` and forwards to it, adding backend-specific filters.
    """

    @property
    def table(self) -> str: ...

    def select(self, columns: Iterable[str]) -> "StatementBuilder": ...

    def where(self, column: str, operator: str, value: Any = None) -> "StatementBuilder": ...

    def where_in(self, column: str, values: Sequence[Any]) -> "StatementBuilder": ...

    def join(self, table: str, condition: str, join_type: str = "INNER") -> "StatementBuilder": ...

    def order_by(self, column: str, direction: str = "ASC") -> "StatementBuilder": ...

    def group_by(self, column: str) -> "StatementBuilder": ...

    def limit(self, limit: int) -> "StatementBuilder": ...

    def offset(self, offset: int) -> "StatementBuilder": ...

    def build_select(self) -> str: ...

    def build_insert(self, data: Mapping[str, Any]) -> str: ...

    def build_update(self, data: Mapping[str, Any]) -> str: ...

    def build_delete(self) -> str: ...

    def get_params(self) -> Dict[str, Any]: ...

    def reset(self) -> "StatementBuilder": ...
