from unittest.mock import MagicMock, patch

from eqp_ingest.database.repositories.error_severity_repository import (
    ErrorSeverityRepository,
)


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


class TestLoadErrorIds:
    @patch("eqp_ingest.database.repositories.error_severity_repository.get_connection")
    def test_returns_trimmed_ids_without_nulls(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = [(" E1001 ",), (None,), ("e2002",)]

        result = ErrorSeverityRepository().load_error_ids()

        assert result == ["E1001", "e2002"]
        assert "err_severity_map" in mock_cursor.execute.call_args.args[0]

    @patch("eqp_ingest.database.repositories.error_severity_repository.get_connection")
    def test_empty_table(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = []

        assert ErrorSeverityRepository().load_error_ids() == []
