"""Unit tests for the transaction state guard."""

import pytest
from unittest.mock import Mock

from dblib.common.exceptions import (
    ErrorCode,
    NoActiveTransactionError,
    NoConnectionError,
    TransactionAlreadyActiveError,
    TransactionFailedError,
)
from dblib.transaction import TransactionGuard, TransactionState


@pytest.fixture
def guard():
    return TransactionGuard()


@pytest.fixture
def active_guard(guard):
    guard.begin(True, Mock())
    return guard


class TestBegin:

    def test_starts_idle(self, guard):
        assert guard.state is TransactionState.IDLE
        assert not guard.in_transaction

    def test_begin_activates_and_returns_start_result(self, guard):
        start = Mock(return_value="handle")

        assert guard.begin(True, start) == "handle"
        assert guard.in_transaction
        start.assert_called_once_with()

    def test_begin_twice_is_rejected(self, active_guard):
        start = Mock()

        with pytest.raises(TransactionAlreadyActiveError):
            active_guard.begin(True, start)

        start.assert_not_called()
        assert active_guard.in_transaction

    def test_already_active_is_checked_before_connection(self, active_guard):
        with pytest.raises(TransactionAlreadyActiveError):
            active_guard.begin(False, Mock())

    def test_begin_without_connection(self, guard):
        start = Mock()

        with pytest.raises(NoConnectionError) as exc_info:
            guard.begin(False, start)

        assert exc_info.value.error_code is ErrorCode.NO_CONNECTION
        start.assert_not_called()
        assert guard.state is TransactionState.IDLE

    def test_driver_failure_on_begin_stays_idle(self, guard):
        error = RuntimeError("server gone")

        with pytest.raises(TransactionFailedError, match="begin") as exc_info:
            guard.begin(True, Mock(side_effect=error))

        assert exc_info.value.cause is error
        assert not guard.in_transaction


class TestCommitAndRollback:

    def test_commit_returns_to_idle(self, active_guard):
        finish = Mock(return_value=None)

        active_guard.commit(finish)

        finish.assert_called_once_with()
        assert active_guard.state is TransactionState.IDLE

    def test_rollback_returns_to_idle(self, active_guard):
        active_guard.rollback(Mock())

        assert not active_guard.in_transaction

    @pytest.mark.parametrize("action", ["commit", "rollback"])
    def test_end_without_transaction(self, guard, action):
        finish = Mock()

        with pytest.raises(NoActiveTransactionError, match=action):
            getattr(guard, action)(finish)

        finish.assert_not_called()

    @pytest.mark.parametrize("action", ["commit", "rollback"])
    def test_driver_failure_still_returns_to_idle(self, active_guard, action):
        with pytest.raises(TransactionFailedError, match=f"Transaction failed: {action}"):
            getattr(active_guard, action)(Mock(side_effect=RuntimeError("boom")))

        assert active_guard.state is TransactionState.IDLE

    def test_second_commit_is_rejected(self, active_guard):
        active_guard.commit(Mock())

        with pytest.raises(NoActiveTransactionError):
            active_guard.commit(Mock())

    def test_new_transaction_after_rollback(self, active_guard):
        active_guard.rollback(Mock())
        active_guard.begin(True, Mock())

        assert active_guard.in_transaction

    def test_clear_forces_idle(self, active_guard):
        active_guard.clear()

        assert active_guard.state is TransactionState.IDLE
