"""Transaction state guard.

The guard owns the ``IDLE``/``ACTIVE`` flag of one connection and decides
whether begin, commit and rollback are legal. The driver-level work is
passed in as a callable, so the guard stays independent of SQLAlchemy and
can be tested on its own.
"""

from enum import Enum
from typing import Any, Callable

from dblib.common.exceptions import (
    DBLibError,
    NoActiveTransactionError,
    NoConnectionError,
    TransactionAlreadyActiveError,
    transaction_failed,
)


class TransactionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


class TransactionGuard:
    """State machine over ``{IDLE, ACTIVE}`` for a single connection.

    Only one transaction may be active at a time; there is no nesting and
    no savepoint support. After commit or rollback the guard is idle again
    even if the driver reported a failure.
    """

    def __init__(self) -> None:
        self._state = TransactionState.IDLE

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def in_transaction(self) -> bool:
        return self._state is TransactionState.ACTIVE

    def begin(self, connected: bool, start: Callable[[], Any]) -> Any:
        """Open a transaction through ``start``.

        Raises:
            TransactionAlreadyActiveError: If a transaction is already active
            NoConnectionError: If ``connected`` is false
            TransactionFailedError: If ``start`` fails; the guard stays idle
        """
        if self.in_transaction:
            raise TransactionAlreadyActiveError("Transaction already active")
        if not connected:
            raise NoConnectionError("No active connection")

        try:
            result = start()
        except DBLibError:
            raise
        except Exception as exc:
            raise transaction_failed("begin", exc)

        self._state = TransactionState.ACTIVE
        return result

    def commit(self, finish: Callable[[], Any]) -> Any:
        """Commit through ``finish`` and return to idle.

        Raises:
            NoActiveTransactionError: If no transaction is active
            TransactionFailedError: If ``finish`` fails
        """
        return self._end("commit", finish)

    def rollback(self, finish: Callable[[], Any]) -> Any:
        """Roll back through ``finish`` and return to idle.

        Raises:
            NoActiveTransactionError: If no transaction is active
            TransactionFailedError: If ``finish`` fails
        """
        return self._end("rollback", finish)

    def _end(self, action: str, finish: Callable[[], Any]) -> Any:
        if not self.in_transaction:
            raise NoActiveTransactionError(f"No active transaction to {action}")

        try:
            return finish()
        except DBLibError:
            raise
        except Exception as exc:
            raise transaction_failed(action, exc)
        finally:
            self._state = TransactionState.IDLE

    def clear(self) -> None:
        """Force the idle state, e.g. when the connection is closed."""
        self._state = TransactionState.IDLE
