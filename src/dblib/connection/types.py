"""Result types returned by connections."""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class StatementResult:
    """Buffered outcome of one executed statement.

    Rows are fetched before the statement's transaction is committed, so
    the result stays readable after the connection moves on.

    Attributes:
        rows: Returned rows as column -> value dictionaries (empty when the
            statement returns no rows)
        columns: Column names in result order
        rowcount: Rows affected or returned, as reported by the driver
    """

    rows: List[Dict[str, Any]] = field(default_factory=list)
    columns: List[str] = field(default_factory=list)
    rowcount: int = 0

    @property
    def returns_rows(self) -> bool:
        return bool(self.columns)

    def scalar(self) -> Any:
        """First column of the first row, or None."""
        if not self.rows:
            return None
        return next(iter(self.rows[0].values()), None)
