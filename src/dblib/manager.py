"""Database manager: the entry point applications use.

``DatabaseManager`` wraps one ``DatabaseConnection``. It times every call,
reports it to a ``QueryLogger`` and re-raises any failure after logging it.
It also hands out query builders and offers ``with`` support for the
connection and for transactions.

Example:
    >>> from dblib import DatabaseManager
    >>> with DatabaseManager.from_environment() as db:
    ...     db.connect()
    ...     builder = db.query_builder("users").where("active", "=", True)
    ...     rows = db.execute_query(builder.build_select(), builder.get_params())
    ...     with db.transaction():
    ...         insert = db.query_builder("audit")
    ...         db.execute_insert(insert.build_insert({"event": "read"}), insert.get_params())
"""

import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

import pandas as pd

from dblib.connection import SupabaseConnection
from dblib.constants.sql import DEFAULT_TEXT_SEARCH_CONFIG, MAX_LOGGED_QUERY_LENGTH, QueryType
from dblib.logging import QueryLogger
from dblib.protocols import DatabaseConnection
from dblib.query_builder import QueryBuilder, SupabaseQueryBuilder
from dblib.settings import DatabaseSettings, get_settings
from dblib.utils.decorators import traced


def _statement_attributes(self, query: str, *args: Any, **kwargs: Any) -> Dict[str, Any]:
    return {
        "db.system": "postgresql",
        "db.statement": query[:MAX_LOGGED_QUERY_LENGTH],
    }


def _procedure_attributes(self, procedure_name: str, *args: Any, **kwargs: Any) -> Dict[str, Any]:
    return {
        "db.system": "postgresql",
        "db.procedure": procedure_name,
    }


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class DatabaseManager:
    """Logged, timed access to a database connection.

    Attributes:
        connection: The wrapped ``DatabaseConnection``
        logger: ``QueryLogger`` receiving query, connection, transaction and
            error entries
        settings: Optional ``DatabaseSettings`` used for log context
    """

    def __init__(
        self,
        connection: DatabaseConnection,
        logger: Optional[QueryLogger] = None,
        settings: Optional[DatabaseSettings] = None,
    ):
        self.connection = connection
        self.logger = logger or QueryLogger()
        self.settings = settings

    # Factories

    @classmethod
    def from_settings(cls, settings=None) -> "DatabaseManager":
        """Create a manager from application settings.

        Args:
            settings: Aggregate settings (``database`` and ``logging``);
                defaults to ``get_settings()``

        Raises:
            ConfigurationError: If required connection settings are missing
        """
        settings = settings or get_settings()
        return cls(
            SupabaseConnection.from_settings(settings.database),
            logger=QueryLogger.from_settings(settings.logging),
            settings=settings.database,
        )

    @classmethod
    def from_environment(cls) -> "DatabaseManager":
        """Create a manager from ``DB_*``/``LOG_*`` environment variables and ``.env``."""
        return cls.from_settings(get_settings(force_reload=True))

    @classmethod
    def from_supabase_url(
        cls,
        supabase_url: str,
        password: str,
        logger: Optional[QueryLogger] = None,
    ) -> "DatabaseManager":
        """Create a manager for a Supabase project URL.

        Raises:
            ConfigurationError: If the URL has no host
        """
        settings = DatabaseSettings.from_supabase_url(supabase_url, password)
        return cls(SupabaseConnection.from_settings(settings), logger=logger, settings=settings)

    @classmethod
    def create_supabase_connection(
        cls,
        host: str,
        port: int,
        database: str,
        username: str,
        password: str,
        **options: Any,
    ) -> "DatabaseManager":
        """Create a manager from explicit connection parameters.

        Extra keyword arguments are ``DatabaseSettings`` fields such as
        ``ssl_mode`` or ``statement_timeout``.
        """
        settings = DatabaseSettings(
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            **options,
        )
        return cls(SupabaseConnection.from_settings(settings), settings=settings)

    # Builders

    def query_builder(self, table: str) -> QueryBuilder:
        return QueryBuilder(table)

    def supabase_query_builder(
        self, table: str, text_search_config: str = DEFAULT_TEXT_SEARCH_CONFIG
    ) -> SupabaseQueryBuilder:
        return SupabaseQueryBuilder(table, text_search_config=text_search_config)

    # Lifecycle

    def _connection_context(self) -> Dict[str, Any]:
        if self.settings is None:
            return {"host": "unknown", "database": "unknown"}
        return {"host": self.settings.host, "database": self.settings.database}

    def connect(self) -> bool:
        start = time.perf_counter()
        try:
            result = self.connection.connect()
        except Exception as exc:
            self.logger.log_error("Connection failed", exc, self._connection_context())
            raise

        context = {"execution_time": f"{_elapsed_ms(start):.2f}ms"}
        context.update(self._connection_context())
        self.logger.log_connection("established", context)
        return result

    def disconnect(self) -> bool:
        try:
            result = self.connection.disconnect()
        except Exception as exc:
            self.logger.log_error("Disconnection failed", exc)
            raise

        self.logger.log_connection("closed")
        return result

    def is_connected(self) -> bool:
        return self.connection.is_connected()

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.is_connected():
            self.disconnect()

    # Statements

    def _timed(self, label: str, query: str, params: Any, call, log_query: Optional[str] = None):
        start = time.perf_counter()
        try:
            result = call()
        except Exception as exc:
            self.logger.log_error(f"{label} execution failed", exc, {"query": query, "params": params})
            raise

        self.logger.log_query(log_query or query, params, _elapsed_ms(start))
        return result

    @traced(
        "dblib.execute_query",
        attributes={"db.operation": QueryType.SELECT.value},
        attribute_getter=_statement_attributes,
    )
    def execute_query(self, query: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Run a SELECT (or any row-returning statement) and return its rows."""
        params = dict(params or {})
        return self._timed("Query", query, params, lambda: self.connection.read(query, params))

    @traced(
        "dblib.execute_insert",
        attributes={"db.operation": QueryType.INSERT.value},
        attribute_getter=_statement_attributes,
    )
    def execute_insert(self, query: str, params: Optional[Mapping[str, Any]] = None) -> int:
        params = dict(params or {})
        return self._timed("Insert", query, params, lambda: self.connection.write(query, params))

    @traced(
        "dblib.execute_update",
        attributes={"db.operation": QueryType.UPDATE.value},
        attribute_getter=_statement_attributes,
    )
    def execute_update(self, query: str, params: Optional[Mapping[str, Any]] = None) -> int:
        params = dict(params or {})
        return self._timed("Update", query, params, lambda: self.connection.update(query, params))

    @traced(
        "dblib.execute_delete",
        attributes={"db.operation": QueryType.DELETE.value},
        attribute_getter=_statement_attributes,
    )
    def execute_delete(self, query: str, params: Optional[Mapping[str, Any]] = None) -> int:
        params = dict(params or {})
        return self._timed("Delete", query, params, lambda: self.connection.delete(query, params))

    @traced(
        "dblib.execute_procedure",
        attributes={"db.operation": QueryType.CALL.value},
        attribute_getter=_procedure_attributes,
    )
    def execute_procedure(self, procedure_name: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """Call a stored procedure with positional arguments."""
        params = list(params)
        return self._timed(
            "Procedure",
            procedure_name,
            params,
            lambda: self.connection.call_procedure(procedure_name, params),
            log_query=f"CALL {procedure_name}",
        )

    @traced(
        "dblib.fetch_dataframe",
        attributes={"db.operation": QueryType.EXECUTE_SQL.value},
        attribute_getter=_statement_attributes,
    )
    def fetch_dataframe(self, query: str, params: Optional[Mapping[str, Any]] = None) -> pd.DataFrame:
        """Run a query and return the result as a pandas DataFrame.

        Column order follows the result set, also when it has no rows.
        """
        params = dict(params or {})
        result = self._timed("Query", query, params, lambda: self.connection.execute(query, params))
        return pd.DataFrame.from_records(result.rows, columns=result.columns)

    # Transactions

    def _transaction_call(self, action: str, label: str, call) -> bool:
        try:
            result = call()
        except Exception as exc:
            self.logger.log_error(f"Transaction {label} failed", exc)
            raise

        self.logger.log_transaction(action)
        return result

    def begin_transaction(self) -> bool:
        return self._transaction_call("started", "start", self.connection.begin_transaction)

    def commit(self) -> bool:
        return self._transaction_call("committed", "commit", self.connection.commit)

    def rollback(self) -> bool:
        return self._transaction_call("rolled back", "rollback", self.connection.rollback)

    def in_transaction(self) -> bool:
        return self.connection.in_transaction()

    @contextmanager
    def transaction(self) -> Iterator["DatabaseManager"]:
        """Run the block in a transaction.

        Commits when the block completes and rolls back when it raises; the
        block's exception is re-raised after the rollback.
        """
        self.begin_transaction()
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        self.commit()

    # Accessors

    def get_last_insert_id(self) -> str:
        return self.connection.get_last_insert_id()

    def get_affected_rows(self) -> int:
        return self.connection.get_affected_rows()

    def health_check(self) -> Dict[str, Any]:
        """Connection, transaction and logging state plus a ``SELECT 1`` round trip.

        A failed ping is reported under ``ping_error`` instead of raising.
        """
        health: Dict[str, Any] = {
            "connected": self.is_connected(),
            "in_transaction": self.in_transaction(),
            "log_enabled": self.logger.enabled,
            "log_level": self.logger.level,
            "log_file": self.logger.log_file,
            "log_size": self.logger.log_size,
        }

        if health["connected"]:
            start = time.perf_counter()
            try:
                self.connection.ping()
            except Exception as exc:
                health["ping_error"] = str(exc)
            else:
                health["ping_time"] = _elapsed_ms(start)

        return health
