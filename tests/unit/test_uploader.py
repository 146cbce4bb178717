from datetime import datetime
from unittest.mock import MagicMock

from psycopg import errors

from eqp_ingest.database.models import EquipmentInfoRecord
from eqp_ingest.database.repositories.batch_repository import BatchRepository
from eqp_ingest.database.repositories.equipment_info_repository import (
    EquipmentInfoRepository,
)
from eqp_ingest.logging.logger import IngestLogger
from eqp_ingest.processor.models import UploadBatch, UploadStatus
from eqp_ingest.processor.uploader import UploadCoordinator


def _make_uploader(logger: IngestLogger) -> tuple[UploadCoordinator, MagicMock, MagicMock]:
    batch_repo = MagicMock(spec=BatchRepository)
    info_repo = MagicMock(spec=EquipmentInfoRepository)
    return UploadCoordinator(batch_repo, info_repo, logger), batch_repo, info_repo


def _make_batch() -> UploadBatch:
    return UploadBatch.from_rows(
        "plg_error",
        [{"eqpid": "EQP01", "error_id": "E1"}, {"eqpid": "EQP01", "error_id": "E2"}],
        {"eqpid": "varchar", "error_id": "varchar"},
    )


def _make_record(**overrides: object) -> EquipmentInfoRecord:
    fields: dict = {
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
    fields.update(overrides)
    return EquipmentInfoRecord(**fields)


class TestInsertRows:
    def test_reports_inserted_count(self, logger: IngestLogger) -> None:
        uploader, batch_repo, _ = _make_uploader(logger)
        batch_repo.insert_rows.return_value = 1

        result = uploader.insert_rows(_make_batch(), ("eqpid",))

        assert result.status is UploadStatus.STORED
        assert result.inserted == 1
        assert result.total == 2
        batch_repo.insert_rows.assert_called_once()

    def test_failure_is_reported_not_raised(self, logger: IngestLogger) -> None:
        uploader, batch_repo, _ = _make_uploader(logger)
        batch_repo.insert_rows.side_effect = RuntimeError("connection lost")

        result = uploader.insert_rows(_make_batch())

        assert result.status is UploadStatus.FAILED
        assert result.inserted == 0
        assert "connection lost" in result.error
        assert not result.succeeded


class TestCopyRows:
    def test_stored(self, logger: IngestLogger) -> None:
        uploader, batch_repo, _ = _make_uploader(logger)
        batch_repo.copy_rows.return_value = 2

        result = uploader.copy_rows(_make_batch())

        assert result.status is UploadStatus.STORED
        assert result.inserted == 2

    def test_unique_violation_is_duplicate(self, logger: IngestLogger) -> None:
        uploader, batch_repo, _ = _make_uploader(logger)
        batch_repo.copy_rows.side_effect = errors.UniqueViolation("duplicate key")

        result = uploader.copy_rows(_make_batch())

        assert result.status is UploadStatus.DUPLICATE
        assert result.inserted == 0
        assert result.succeeded

    def test_other_error_is_failed(self, logger: IngestLogger) -> None:
        uploader, batch_repo, _ = _make_uploader(logger)
        batch_repo.copy_rows.side_effect = RuntimeError("disk full")

        result = uploader.copy_rows(_make_batch())

        assert result.status is UploadStatus.FAILED
        assert result.error == "disk full"


class TestSaveEquipmentInfo:
    def test_inserts_when_missing(self, logger: IngestLogger) -> None:
        uploader, _, info_repo = _make_uploader(logger)
        info_repo.find_by_eqpid.return_value = None
        record = _make_record()

        assert uploader.save_equipment_info(record) is True
        info_repo.upsert.assert_called_once_with(record)

    def test_unchanged_descriptor_skips_write(self, logger: IngestLogger) -> None:
        uploader, _, info_repo = _make_uploader(logger)
        info_repo.find_by_eqpid.return_value = _make_record(serv_ts=datetime(2020, 1, 1))

        assert uploader.save_equipment_info(_make_record()) is False
        info_repo.upsert.assert_not_called()

    def test_one_changed_field_writes_once(self, logger: IngestLogger) -> None:
        uploader, _, info_repo = _make_uploader(logger)
        info_repo.find_by_eqpid.return_value = _make_record()

        assert uploader.save_equipment_info(_make_record(serial_num="SN-0043")) is True
        assert info_repo.upsert.call_count == 1

    def test_failure_is_logged_not_raised(self, logger: IngestLogger) -> None:
        uploader, _, info_repo = _make_uploader(logger)
        info_repo.find_by_eqpid.side_effect = RuntimeError("db down")

        assert uploader.save_equipment_info(_make_record()) is False
        info_repo.upsert.assert_not_called()
