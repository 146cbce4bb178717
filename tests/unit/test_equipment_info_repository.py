from datetime import datetime
from unittest.mock import MagicMock, patch

from eqp_ingest.database.models import EquipmentInfoRecord
from eqp_ingest.database.repositories.equipment_info_repository import (
    EquipmentInfoRepository,
)


def _make_row() -> dict:
    return {
        "eqpid": "EQP01",
        "system_name": "ATLAS-01",
        "system_model": "A300",
        "serial_num": "SN-0042",
        "application": "Metrology",
        "version": "7.2.1",
        "db_version": "19",
        "date": datetime(2023, 9, 14, 14, 5, 30),
        "serv_ts": datetime(2023, 9, 14, 15, 5, 30),
    }


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


class TestFindByEqpid:
    @patch("eqp_ingest.database.repositories.equipment_info_repository.get_connection")
    def test_returns_record_when_found(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _make_row()

        result = EquipmentInfoRepository().find_by_eqpid("EQP01")

        assert result == EquipmentInfoRecord(**_make_row())
        assert mock_cursor.execute.call_args.args[1] == ("EQP01",)

    @patch("eqp_ingest.database.repositories.equipment_info_repository.get_connection")
    def test_returns_none_when_missing(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        assert EquipmentInfoRepository().find_by_eqpid("NOPE") is None


class TestUpsert:
    @patch("eqp_ingest.database.repositories.equipment_info_repository.get_connection")
    def test_executes_upsert_and_commits(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)
        record = EquipmentInfoRecord(**_make_row())

        EquipmentInfoRepository().upsert(record)

        query, params = mock_conn.execute.call_args.args
        assert "ON CONFLICT (eqpid) DO UPDATE" in query
        assert params[0] == "EQP01"
        assert params[-1] == datetime(2023, 9, 14, 15, 5, 30)
        mock_conn.commit.assert_called_once()


class TestSameDescriptor:
    def test_identical_descriptor_ignores_timestamps(self) -> None:
        stored = EquipmentInfoRecord(**_make_row())
        incoming = EquipmentInfoRecord(**{**_make_row(), "serv_ts": datetime(2024, 1, 1)})

        assert stored.same_descriptor(incoming)

    def test_one_changed_field_differs(self) -> None:
        stored = EquipmentInfoRecord(**_make_row())
        incoming = EquipmentInfoRecord(**{**_make_row(), "version": "7.3.0"})

        assert not stored.same_descriptor(incoming)
