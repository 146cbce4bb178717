from collections.abc import Sequence

from psycopg import errors

from eqp_ingest.database.models import EquipmentInfoRecord
from eqp_ingest.database.repositories.batch_repository import BatchRepository
from eqp_ingest.database.repositories.equipment_info_repository import (
    EquipmentInfoRepository,
)
from eqp_ingest.logging.logger import IngestLogger
from eqp_ingest.processor.models import UploadBatch, UploadResult, UploadStatus


class UploadCoordinator:
    """Persists batches idempotently and reports what actually landed."""

    def __init__(
        self,
        batch_repo: BatchRepository,
        info_repo: EquipmentInfoRepository,
        logger: IngestLogger,
    ) -> None:
        self._batch_repo = batch_repo
        self._info_repo = info_repo
        self._logger = logger

    def insert_rows(
        self,
        batch: UploadBatch,
        conflict_target: Sequence[str] | None = None,
    ) -> UploadResult:
        """Transactional row-by-row insert; conflicting rows count as zero."""
        self._logger.debug(f"Starting DB upload of {len(batch)} rows to '{batch.table}'.")
        try:
            inserted = self._batch_repo.insert_rows(batch, conflict_target)
        except Exception as exc:
            self._logger.error(f"DB upload failed for {batch.table}: {exc}", exc_info=True)
            return UploadResult(
                table=batch.table,
                status=UploadStatus.FAILED,
                total=len(batch),
                error=str(exc),
            )
        self._logger.event(
            f"Successfully uploaded {inserted} of {len(batch)} rows to {batch.table}."
        )
        return UploadResult(
            table=batch.table,
            status=UploadStatus.STORED,
            inserted=inserted,
            total=len(batch),
        )

    def copy_rows(self, batch: UploadBatch) -> UploadResult:
        """Binary bulk load; a unique violation means the batch is already stored."""
        self._logger.debug(f"Starting binary COPY of {len(batch)} rows to '{batch.table}'.")
        try:
            inserted = self._batch_repo.copy_rows(batch)
        except errors.UniqueViolation:
            self._logger.event(f"Skipping duplicate entries for {batch.table}.")
            return UploadResult(
                table=batch.table,
                status=UploadStatus.DUPLICATE,
                total=len(batch),
            )
        except Exception as exc:
            self._logger.error(f"DB upload failed for {batch.table}: {exc}", exc_info=True)
            return UploadResult(
                table=batch.table,
                status=UploadStatus.FAILED,
                total=len(batch),
                error=str(exc),
            )
        self._logger.event(f"Successfully uploaded {inserted} rows to {batch.table}.")
        return UploadResult(
            table=batch.table,
            status=UploadStatus.STORED,
            inserted=inserted,
            total=len(batch),
        )

    def save_equipment_info(self, record: EquipmentInfoRecord) -> bool:
        """Upsert ``record`` unless the stored descriptor is identical.

        Returns True when a write was issued. Failures are logged, not raised.
        """
        try:
            current = self._info_repo.find_by_eqpid(record.eqpid)
            if current is not None and current.same_descriptor(record):
                self._logger.debug(f"itm_info unchanged for eqpid: {record.eqpid}")
                return False
            self._info_repo.upsert(record)
        except Exception as exc:
            self._logger.error(f"DB upload failed for itm_info: {exc}", exc_info=True)
            return False
        self._logger.event(f"itm_info table updated for eqpid: {record.eqpid}")
        return True
