from collections.abc import Sequence
from datetime import datetime

from eqp_ingest.database.models import EquipmentInfoRecord
from eqp_ingest.filtering.allow_list import AllowListFilter
from eqp_ingest.logging.logger import IngestLogger
from eqp_ingest.parsing.base import BaseRowParser
from eqp_ingest.parsing.metadata import MetadataExtractor
from eqp_ingest.parsing.timestamps import DB_TEXT_FORMAT, parse_exact, truncate_to_seconds
from eqp_ingest.processor.exceptions import HeaderNotFoundError
from eqp_ingest.processor.file_loader import FileLoader
from eqp_ingest.processor.models import IngestOutcome, UploadBatch, UploadStatus
from eqp_ingest.processor.pipeline import PipelineContext, PipelineStep
from eqp_ingest.processor.retry import RetryPolicy
from eqp_ingest.processor.uploader import UploadCoordinator
from eqp_ingest.timesync.base import BaseTimeSync
from eqp_ingest.timesync.reconciler import TimeReconciler


class WaitForFileStep(PipelineStep):
    def __init__(
        self,
        file_loader: FileLoader,
        policy: RetryPolicy,
        logger: IngestLogger,
    ) -> None:
        self._file_loader = file_loader
        self._policy = policy
        self._logger = logger

    def run(self, context: PipelineContext) -> PipelineContext:
        if not self._file_loader.wait_until_ready(context.path, self._policy):
            self._logger.event(f"SKIPPED (file is locked): {context.path.name}")
            return context.stop(IngestOutcome.SKIPPED_LOCKED)
        return context


class ReadFileStep(PipelineStep):
    def __init__(
        self,
        file_loader: FileLoader,
        encoding: str,
        timeout_seconds: float,
        logger: IngestLogger,
    ) -> None:
        self._file_loader = file_loader
        self._encoding = encoding
        self._timeout_seconds = timeout_seconds
        self._logger = logger

    def run(self, context: PipelineContext) -> PipelineContext:
        context.lines = self._file_loader.read_lines(
            context.path, self._encoding, self._timeout_seconds
        )
        if not context.lines:
            self._logger.event(f"File is empty, skipping processing: {context.path.name}")
            return context.stop(IngestOutcome.NO_ROWS)
        self._logger.debug(f"Read {len(context.lines)} lines from {context.path.name}.")
        return context


class ExtractMetadataStep(PipelineStep):
    def __init__(self, extractor: MetadataExtractor) -> None:
        self._extractor = extractor

    def run(self, context: PipelineContext) -> PipelineContext:
        context.metadata = self._extractor.extract(context.lines)
        return context


class SaveEquipmentInfoStep(PipelineStep):
    """Upserts the itm_info row described by the error-log header block."""

    def __init__(
        self,
        uploader: UploadCoordinator,
        time_sync: BaseTimeSync,
        eqpid: str,
    ) -> None:
        self._uploader = uploader
        self._time_sync = time_sync
        self._eqpid = eqpid

    def run(self, context: PipelineContext) -> PipelineContext:
        record = self.build_record(context)
        context.equipment_info_written = self._uploader.save_equipment_info(record)
        return context

    def build_record(self, context: PipelineContext) -> EquipmentInfoRecord:
        meta = context.metadata
        date = parse_exact(meta.get("DATE"), (DB_TEXT_FORMAT,))
        serv_ts = self._time_sync.to_synchronized(date or datetime.now())
        return EquipmentInfoRecord(
            eqpid=meta.get("EqpId") or self._eqpid,
            system_name=meta.get("SYSTEM_NAME"),
            system_model=meta.get("SYSTEM_MODEL"),
            serial_num=meta.get("SERIAL_NUM"),
            application=meta.get("APPLICATION"),
            version=meta.get("VERSION"),
            db_version=meta.get("DB_VERSION"),
            date=date,
            serv_ts=truncate_to_seconds(serv_ts),
        )


class ParseRowsStep(PipelineStep):
    def __init__(self, parser: BaseRowParser, logger: IngestLogger) -> None:
        self._parser = parser
        self._logger = logger

    def run(self, context: PipelineContext) -> PipelineContext:
        try:
            result = self._parser.parse(context.lines, context.metadata)
        except HeaderNotFoundError as exc:
            self._logger.error(f"{exc} in '{context.path.name}'. Skipping file.")
            return context.stop(IngestOutcome.MALFORMED)
        context.rows = result.rows
        context.skipped_lines = result.skipped_lines
        if not context.rows:
            self._logger.event(
                f"No valid data rows were parsed from '{context.path.name}'. "
                "Skipping DB upload."
            )
            return context.stop(IngestOutcome.NO_ROWS)
        self._logger.debug(
            f"Parsed {len(context.rows)} data rows ({context.skipped_lines} skipped)."
        )
        return context


class ReconcileTimeStep(PipelineStep):
    def __init__(self, reconciler: TimeReconciler, source_column: str) -> None:
        self._reconciler = reconciler
        self._source_column = source_column

    def run(self, context: PipelineContext) -> PipelineContext:
        self._reconciler.reconcile(context.rows, self._source_column)
        return context


class FilterAllowedStep(PipelineStep):
    def __init__(self, allow_filter: AllowListFilter, logger: IngestLogger) -> None:
        self._allow_filter = allow_filter
        self._logger = logger

    def run(self, context: PipelineContext) -> PipelineContext:
        result = self._allow_filter.apply(context.rows)
        context.filter_result = result
        context.rows = result.rows
        self._logger.event(
            f"ErrorFilter Result for {context.path.name}: Total={result.total}, "
            f"Matched={result.matched}, Skipped={result.skipped}"
        )
        if result.degraded:
            self._logger.error(
                f"Allow-list unavailable; all {result.skipped} rows of "
                f"{context.path.name} were withheld."
            )
        if not context.rows:
            self._logger.event("No rows to upload after filtering.")
            return context.stop(IngestOutcome.NO_ROWS)
        return context


class InsertRowsStep(PipelineStep):
    """Transactional insert with ``ON CONFLICT DO NOTHING``."""

    def __init__(
        self,
        uploader: UploadCoordinator,
        table: str,
        conflict_target: Sequence[str] | None = None,
    ) -> None:
        self._uploader = uploader
        self._table = table
        self._conflict_target = conflict_target

    def run(self, context: PipelineContext) -> PipelineContext:
        batch = UploadBatch.from_rows(self._table, context.rows)
        context.upload_result = self._uploader.insert_rows(batch, self._conflict_target)
        if context.upload_result.status is UploadStatus.FAILED:
            return context.stop(IngestOutcome.FAILED)
        return context


class CopyRowsStep(PipelineStep):
    """Binary bulk load tolerant of already-ingested batches."""

    def __init__(
        self,
        uploader: UploadCoordinator,
        table: str,
        column_types: dict[str, str],
    ) -> None:
        self._uploader = uploader
        self._table = table
        self._column_types = column_types

    def run(self, context: PipelineContext) -> PipelineContext:
        batch = UploadBatch.from_rows(self._table, context.rows, self._column_types)
        context.upload_result = self._uploader.copy_rows(batch)
        if context.upload_result.status is UploadStatus.FAILED:
            return context.stop(IngestOutcome.FAILED)
        return context


class DeleteSourceStep(PipelineStep):
    """Removes the source file once its rows are durably stored."""

    def __init__(self, logger: IngestLogger, enabled: bool = True) -> None:
        self._logger = logger
        self._enabled = enabled

    def run(self, context: PipelineContext) -> PipelineContext:
        if not self._enabled:
            return context
        if context.upload_result is None or not context.upload_result.succeeded:
            return context
        try:
            context.path.unlink()
        except OSError as exc:
            self._logger.error(f"Failed to delete processed file '{context.path}': {exc}")
            return context
        context.source_deleted = True
        self._logger.event(f"Successfully deleted processed file: {context.path.name}")
        return context
