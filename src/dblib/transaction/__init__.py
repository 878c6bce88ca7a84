"""Transaction guard for single-connection transactions."""

from dblib.transaction.guard import TransactionGuard, TransactionState

__all__ = [
    "TransactionGuard",
    "TransactionState",
]
