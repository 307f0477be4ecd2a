"""Tests for the pooled-connection retry helper."""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from app import database


def _disconnect(message: str) -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception(message))


@patch.object(database.time, "sleep")
def test_retries_transient_disconnects(sleep):
    func = MagicMock(side_effect=[_disconnect("server closed the connection unexpectedly"), "ok"])

    assert database.with_db_retry("ping", func) == "ok"
    assert func.call_count == 2
    sleep.assert_called_once()


@patch.object(database.time, "sleep")
def test_other_operational_errors_are_not_retried(sleep):
    func = MagicMock(side_effect=_disconnect("password authentication failed"))

    with pytest.raises(OperationalError):
        database.with_db_retry("ping", func)
    assert func.call_count == 1
    sleep.assert_not_called()


@patch.object(database.time, "sleep")
def test_gives_up_after_max_attempts(sleep):
    func = MagicMock(side_effect=_disconnect("SSL connection has been closed unexpectedly"))

    with pytest.raises(OperationalError):
        database.with_db_retry("ping", func, max_attempts=2)
    assert func.call_count == 2


def test_sqlite_memory_engine_shares_one_connection():
    engine = database.build_engine("sqlite://")
    assert engine.pool.__class__.__name__ == "StaticPool"
