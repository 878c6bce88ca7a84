"""Supabase/PostgreSQL connection on top of SQLAlchemy.

The connection holds one SQLAlchemy ``Connection`` from a non-pooling
engine. Outside a transaction every statement is committed as soon as its
rows have been fetched; between ``begin_transaction()`` and
``commit()``/``rollback()`` statements share one database transaction whose
sequencing is enforced by ``TransactionGuard``.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Connection, CursorResult, Engine
from sqlalchemy.pool import NullPool

from dblib.common.exceptions import (
    NoConnectionError,
    QueryFailedError,
    connection_failed,
    procedure_failed,
    query_failed,
)
from dblib.connection.types import StatementResult
from dblib.logging import get_logger
from dblib.query_builder.sanitizer import sanitize_identifier
from dblib.settings import DatabaseSettings
from dblib.transaction import TransactionGuard


logger = get_logger(__name__)


def _buffer(result: CursorResult) -> StatementResult:
    if not result.returns_rows:
        return StatementResult(rowcount=result.rowcount)

    columns = list(result.keys())
    rows = [dict(row) for row in result.mappings()]
    return StatementResult(rows=rows, columns=columns, rowcount=len(rows))


class SupabaseConnection:
    """Connection to a Supabase (PostgreSQL) database.

    Statements use SQLAlchemy ``text()`` bind syntax (``:name``), which is
    what ``QueryBuilder`` renders, so builder output and its parameter map
    can be passed straight through:

        >>> conn = SupabaseConnection.from_settings(settings)
        >>> conn.connect()
        >>> builder = QueryBuilder("users").where("id", "=", 5)
        >>> conn.read(builder.build_select(), builder.get_params())
        [{'id': 5, 'name': 'Ada'}]

    Not thread-safe; use one instance per thread.
    """

    def __init__(
        self,
        url: URL,
        connect_args: Optional[Dict[str, Any]] = None,
        engine_factory: Callable[..., Engine] = create_engine,
    ):
        """Initialize an unconnected connection.

        Args:
            url: SQLAlchemy URL of the database
            connect_args: Keyword arguments forwarded to the DBAPI ``connect``
            engine_factory: Engine constructor, ``sqlalchemy.create_engine``
                unless overridden
        """
        self._url = url
        self._connect_args = dict(connect_args or {})
        self._engine_factory = engine_factory

        self._engine: Optional[Engine] = None
        self._connection: Optional[Connection] = None
        self._transaction = None
        self._guard = TransactionGuard()
        self._affected_rows = 0

    @classmethod
    def from_settings(cls, settings: DatabaseSettings, **kwargs: Any) -> "SupabaseConnection":
        """Create a connection from ``DatabaseSettings``.

        Raises:
            ConfigurationError: If host, database, username or password is missing
        """
        return cls(settings.sqlalchemy_url(), settings.connect_args(), **kwargs)

    @property
    def url(self) -> URL:
        return self._url

    @property
    def guard(self) -> TransactionGuard:
        return self._guard

    # Lifecycle

    def connect(self) -> bool:
        """Open the connection; a no-op when already connected.

        Raises:
            ConnectionFailedError: If the server cannot be reached or rejects the login
        """
        if self._connection is not None:
            return True

        engine = None
        try:
            engine = self._engine_factory(
                self._url,
                poolclass=NullPool,
                connect_args=self._connect_args,
            )
            connection = engine.connect()
        except Exception as exc:
            if engine is not None:
                engine.dispose()
            raise connection_failed(exc, host=self._url.host, database=self._url.database)

        self._engine = engine
        self._connection = connection
        logger.debug(
            "Connected to %s/%s",
            self._url.host,
            self._url.database,
        )
        return True

    def disconnect(self) -> bool:
        """Close the connection; an open transaction is rolled back by the server."""
        connection, engine = self._connection, self._engine
        self._connection = None
        self._engine = None
        self._transaction = None
        self._guard.clear()

        if connection is not None:
            connection.close()
        if engine is not None:
            engine.dispose()
        return True

    def is_connected(self) -> bool:
        return self._connection is not None and not self._connection.closed

    def _require_connection(self) -> Connection:
        if not self.is_connected():
            raise NoConnectionError("No active connection")
        return self._connection

    # Statements

    def _run(
        self,
        query: str,
        params: Optional[Mapping[str, Any]] = None,
        track_rowcount: bool = True,
    ) -> StatementResult:
        connection = self._require_connection()
        in_transaction = self._guard.in_transaction

        try:
            result = _buffer(connection.execute(text(query), dict(params or {})))
            if not in_transaction:
                connection.commit()
        except Exception as exc:
            if not in_transaction:
                self._discard_autobegin(connection)
            raise query_failed(query, exc)

        if track_rowcount:
            self._affected_rows = result.rowcount
        return result

    @staticmethod
    def _discard_autobegin(connection: Connection) -> None:
        try:
            connection.rollback()
        except Exception as exc:
            logger.warning("Rollback after failed statement did not complete: %s", exc)

    def read(self, query: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Run a row-returning statement and return its rows as dictionaries."""
        return self._run(query, params).rows

    def write(self, query: str, params: Optional[Mapping[str, Any]] = None) -> int:
        """Run an INSERT and return the affected row count."""
        return self._run(query, params).rowcount

    def update(self, query: str, params: Optional[Mapping[str, Any]] = None) -> int:
        return self._run(query, params).rowcount

    def delete(self, query: str, params: Optional[Mapping[str, Any]] = None) -> int:
        return self._run(query, params).rowcount

    def execute(self, query: str, params: Optional[Mapping[str, Any]] = None) -> StatementResult:
        """Run any statement and return its buffered result."""
        return self._run(query, params)

    def call_procedure(self, procedure_name: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """Run ``CALL <procedure>(:p0, :p1, ...)`` with positional ``params``.

        The procedure name is sanitized like any other identifier; arguments
        are always bound.

        Raises:
            InvalidIdentifierError: If the procedure name is unusable
            ProcedureFailedError: If the call fails
        """
        name = sanitize_identifier(procedure_name)
        bindings = {f"p{index}": value for index, value in enumerate(params)}
        placeholders = ", ".join(f":{key}" for key in bindings)

        try:
            return self._run(f"CALL {name}({placeholders})", bindings).rows
        except QueryFailedError as exc:
            raise procedure_failed(name, exc.cause or exc)

    # Transactions

    def begin_transaction(self) -> bool:
        """Start a transaction.

        Raises:
            TransactionAlreadyActiveError: If a transaction is already active
            NoConnectionError: If not connected
            TransactionFailedError: If the driver cannot start the transaction
        """
        self._transaction = self._guard.begin(self.is_connected(), self._connection_begin)
        return True

    def _connection_begin(self):
        return self._connection.begin()

    def commit(self) -> bool:
        """Commit the active transaction.

        Raises:
            NoActiveTransactionError: If no transaction is active
            TransactionFailedError: If the commit fails
        """
        try:
            self._guard.commit(self._transaction.commit if self._transaction else None)
        finally:
            self._transaction = None
        return True

    def rollback(self) -> bool:
        """Roll back the active transaction.

        Raises:
            NoActiveTransactionError: If no transaction is active
            TransactionFailedError: If the rollback fails
        """
        try:
            self._guard.rollback(self._transaction.rollback if self._transaction else None)
        finally:
            self._transaction = None
        return True

    def in_transaction(self) -> bool:
        return self._guard.in_transaction

    # Accessors

    def ping(self) -> None:
        """Round-trip ``SELECT 1``; the affected-row count is left untouched."""
        self._run("SELECT 1", track_rowcount=False)

    def get_last_insert_id(self) -> str:
        """Value most recently obtained from a sequence in this session.

        Raises:
            QueryFailedError: If no sequence value has been generated yet
        """
        result = self._run("SELECT lastval()", track_rowcount=False)
        return str(result.scalar())

    def get_affected_rows(self) -> int:
        """Row count of the last statement run through this connection."""
        self._require_connection()
        return self._affected_rows
