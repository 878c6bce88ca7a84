"""Connection contract consumed by ``DatabaseManager``."""

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

from dblib.connection.types import StatementResult


@runtime_checkable
class DatabaseConnection(Protocol):
    """A single logical database connection with transaction control.

    Statement methods take SQL text with ``:name`` placeholders and the
    matching parameter map. Driver failures surface as ``DBLibError``
    subclasses (``ConnectionFailedError``, ``QueryFailedError``,
    ``ProcedureFailedError``, ``TransactionFailedError``); transaction
    sequencing violations are raised before the driver is touched.
    """

    def connect(self) -> bool: ...

    def disconnect(self) -> bool: ...

    def is_connected(self) -> bool: ...

    def read(self, query: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]: ...

    def write(self, query: str, params: Optional[Mapping[str, Any]] = None) -> int: ...

    def update(self, query: str, params: Optional[Mapping[str, Any]] = None) -> int: ...

    def delete(self, query: str, params: Optional[Mapping[str, Any]] = None) -> int: ...

    def execute(self, query: str, params: Optional[Mapping[str, Any]] = None) -> StatementResult: ...

    def call_procedure(self, procedure_name: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]: ...

    def begin_transaction(self) -> bool: ...

    def commit(self) -> bool: ...

    def rollback(self) -> bool: ...

    def in_transaction(self) -> bool: ...

    def ping(self) -> None: ...

    def get_last_insert_id(self) -> str: ...

    def get_affected_rows(self) -> int: ...
