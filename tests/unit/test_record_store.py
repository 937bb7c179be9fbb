from unittest.mock import MagicMock, patch

import psycopg
import pytest

from intake.database.exceptions import RecordStoreError
from intake.database.repositories.accounts_repository import AccountsRepository
from intake.database.repositories.record_store import PostgresRecordStore


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


class TestInsert:
    @patch("intake.database.repositories.record_store.get_connection")
    def test_returns_stored_row_and_commits(self, mock_get_conn: MagicMock) -> None:
        conn, cursor = _mock_connection(mock_get_conn)
        cursor.fetchone.return_value = {"id": 5, "name": "Hummus"}

        row = PostgresRecordStore().insert("dishes", {"name": "Hummus", "notes": None})

        assert row == {"id": 5, "name": "Hummus"}
        _query, params = cursor.execute.call_args.args
        assert params == ["Hummus", None]
        conn.commit.assert_called_once()

    @patch("intake.database.repositories.record_store.get_connection")
    def test_wraps_database_errors(self, mock_get_conn: MagicMock) -> None:
        _conn, cursor = _mock_connection(mock_get_conn)
        cursor.execute.side_effect = psycopg.errors.UndefinedTable("relation missing")

        with pytest.raises(RecordStoreError, match="Insert into dishes failed"):
            PostgresRecordStore().insert("dishes", {"name": "x"})

    @patch("intake.database.repositories.record_store.get_connection")
    def test_raises_when_no_row_returned(self, mock_get_conn: MagicMock) -> None:
        _conn, cursor = _mock_connection(mock_get_conn)
        cursor.fetchone.return_value = None

        with pytest.raises(RecordStoreError, match="returned no row"):
            PostgresRecordStore().insert("dishes", {"name": "x"})

    def test_rejects_empty_row(self) -> None:
        with pytest.raises(RecordStoreError, match="empty row"):
            PostgresRecordStore().insert("dishes", {})


class TestUpdate:
    @patch("intake.database.repositories.record_store.get_connection")
    def test_binds_fields_then_key(self, mock_get_conn: MagicMock) -> None:
        conn, cursor = _mock_connection(mock_get_conn)
        cursor.rowcount = 1

        PostgresRecordStore().update(
            "clients", {"client_id": "c-1"}, {"remaining_servings": 3}
        )

        _query, params = cursor.execute.call_args.args
        assert params == [3, "c-1"]
        conn.commit.assert_called_once()

    @patch("intake.database.repositories.record_store.get_connection")
    def test_raises_when_nothing_matched(self, mock_get_conn: MagicMock) -> None:
        _conn, cursor = _mock_connection(mock_get_conn)
        cursor.rowcount = 0

        with pytest.raises(RecordStoreError, match="No row in clients"):
            PostgresRecordStore().update("clients", {"client_id": "x"}, {"remaining_servings": 0})


class TestAccountsRepository:
    @patch("intake.database.repositories.accounts_repository.get_connection")
    def test_returns_remaining(self, mock_get_conn: MagicMock) -> None:
        _conn, cursor = _mock_connection(mock_get_conn)
        cursor.fetchone.return_value = (7,)

        assert AccountsRepository().remaining("c-1") == 7
        sql, params = cursor.execute.call_args.args
        assert "remaining_servings" in sql
        assert params == ("c-1",)

    @patch("intake.database.repositories.accounts_repository.get_connection")
    def test_unknown_owner_has_no_allowance_on_record(self, mock_get_conn: MagicMock) -> None:
        _conn, cursor = _mock_connection(mock_get_conn)
        cursor.fetchone.return_value = None

        assert AccountsRepository().remaining("ghost") is None

    @patch("intake.database.repositories.accounts_repository.get_connection")
    def test_null_allowance_is_unknown(self, mock_get_conn: MagicMock) -> None:
        _conn, cursor = _mock_connection(mock_get_conn)
        cursor.fetchone.return_value = (None,)

        assert AccountsRepository().remaining("c-1") is None

    @patch("intake.database.repositories.accounts_repository.get_connection")
    def test_deduct_is_one_conditional_update_plus_audit_row(
        self, mock_get_conn: MagicMock
    ) -> None:
        conn, cursor = _mock_connection(mock_get_conn)
        cursor.fetchone.return_value = (4,)

        assert AccountsRepository().deduct("c-1", "Deducted for new submission: A") == (5, 4)

        update_sql, update_params = cursor.execute.call_args_list[0].args
        assert "remaining_servings = remaining_servings - 1" in update_sql
        assert "remaining_servings > 0" in update_sql
        assert update_params == ("c-1",)
        audit_sql, audit_params = cursor.execute.call_args_list[1].args
        assert "client_servings_log" in audit_sql
        assert audit_params == ("c-1", 5, 4, "Deducted for new submission: A")
        conn.commit.assert_called_once()

    @patch("intake.database.repositories.accounts_repository.get_connection")
    def test_deduct_with_nothing_left_writes_no_audit_row(
        self, mock_get_conn: MagicMock
    ) -> None:
        conn, cursor = _mock_connection(mock_get_conn)
        cursor.fetchone.return_value = None

        assert AccountsRepository().deduct("c-1", "note") is None

        assert cursor.execute.call_count == 1
        conn.commit.assert_not_called()

    @patch("intake.database.repositories.accounts_repository.get_connection")
    def test_deduct_wraps_database_errors(self, mock_get_conn: MagicMock) -> None:
        _conn, cursor = _mock_connection(mock_get_conn)
        cursor.execute.side_effect = psycopg.OperationalError("server closed")

        with pytest.raises(RecordStoreError, match="deduction for c-1 failed"):
            AccountsRepository().deduct("c-1", "note")
