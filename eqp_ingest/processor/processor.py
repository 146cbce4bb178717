from enum import Enum
from pathlib import Path

from eqp_ingest.config.settings import Settings
from eqp_ingest.database.repositories.batch_repository import BatchRepository
from eqp_ingest.database.repositories.equipment_info_repository import (
    EquipmentInfoRepository,
)
from eqp_ingest.database.repositories.error_severity_repository import (
    ErrorSeverityRepository,
)
from eqp_ingest.filtering.allow_list import AllowListFilter
from eqp_ingest.logging.logger import IngestLogger, Log
from eqp_ingest.parsing.error_log import ErrorLogRowParser
from eqp_ingest.parsing.metadata import (
    ErrorLogMetadataExtractor,
    WaferFlatMetadataExtractor,
)
from eqp_ingest.parsing.prealign import PrealignRowParser
from eqp_ingest.parsing.wafer_flat import WaferFlatRowParser
from eqp_ingest.processor.file_loader import FileLoader
from eqp_ingest.processor.models import IngestOutcome
from eqp_ingest.processor.pipeline import PipelineContext, PipelineStep
from eqp_ingest.processor.retry import (
    ERROR_LOG_READY_POLICY,
    PREALIGN_READY_POLICY,
    WAFER_FLAT_READY_POLICY,
)
from eqp_ingest.processor.steps import (
    CopyRowsStep,
    DeleteSourceStep,
    ExtractMetadataStep,
    FilterAllowedStep,
    InsertRowsStep,
    ParseRowsStep,
    ReadFileStep,
    ReconcileTimeStep,
    SaveEquipmentInfoStep,
    WaitForFileStep,
)
from eqp_ingest.processor.uploader import UploadCoordinator
from eqp_ingest.timesync.base import BaseTimeSync
from eqp_ingest.timesync.reconciler import TimeReconciler

WAFER_FLAT_TABLE = "plg_wf_flat"
ERROR_TABLE = "plg_error"
PREALIGN_TABLE = "plg_prealign"

PREALIGN_NATURAL_KEY = ("eqpid", "datetime")

ERROR_COLUMN_TYPES = {
    "eqpid": "varchar",
    "error_id": "varchar",
    "time_stamp": "timestamp",
    "error_label": "varchar",
    "error_desc": "varchar",
    "millisecond": "int4",
    "extra_message_1": "varchar",
    "extra_message_2": "varchar",
    "serv_ts": "timestamp",
}


class LogFormat(str, Enum):
    WAFER_FLAT = "wafer_flat"
    ERROR = "error"
    PREALIGN = "prealign"


PLUGIN_NAMES = {
    LogFormat.WAFER_FLAT: "WaferFlat",
    LogFormat.ERROR: "ErrorLog",
    LogFormat.PREALIGN: "Prealign",
}


class Processor:
    """Runs the ingest pipeline for one file.

    Pipeline: wait -> read -> [metadata] -> parse -> reconcile -> [filter] ->
    upload -> delete. Every exception is caught and logged here; one bad
    file never propagates to the host.
    """

    def __init__(self, steps: list[PipelineStep], logger: IngestLogger) -> None:
        self._steps = steps
        self._logger = logger

    def process(self, file_path: Path | str) -> IngestOutcome:
        context = PipelineContext(path=Path(file_path))
        self._logger.event(f"Execute called for file: {context.path.name}")
        try:
            for step in self._steps:
                context = step.run(context)
                if context.outcome is not None:
                    break
        except Exception as exc:
            self._logger.error(
                f"An unhandled exception occurred while processing "
                f"{context.path.name}: {exc}",
                exc_info=True,
            )
            return IngestOutcome.FAILED
        return context.final_outcome()


def build_processor(
    log_format: LogFormat,
    settings: Settings,
    time_sync: BaseTimeSync,
    logger: IngestLogger,
    file_loader: FileLoader | None = None,
) -> Processor:
    """Assemble the step list for ``log_format``."""
    file_loader = file_loader or FileLoader()
    uploader = UploadCoordinator(BatchRepository(), EquipmentInfoRepository(), logger)
    reconciler = TimeReconciler(time_sync)
    eqpid = settings.eqpid
    read = ReadFileStep(
        file_loader, settings.file_encoding, settings.read_timeout_seconds, logger
    )
    delete = DeleteSourceStep(logger, enabled=settings.delete_source_on_success)

    steps: list[PipelineStep]
    if log_format is LogFormat.WAFER_FLAT:
        parser = WaferFlatRowParser(eqpid, logger)
        steps = [
            WaitForFileStep(file_loader, WAFER_FLAT_READY_POLICY, logger),
            read,
            ExtractMetadataStep(WaferFlatMetadataExtractor(logger)),
            ParseRowsStep(parser, logger),
            ReconcileTimeStep(reconciler, parser.timestamp_column),
            InsertRowsStep(uploader, WAFER_FLAT_TABLE),
            delete,
        ]
    elif log_format is LogFormat.ERROR:
        parser = ErrorLogRowParser(eqpid, logger)
        steps = [
            WaitForFileStep(file_loader, ERROR_LOG_READY_POLICY, logger),
            read,
            ExtractMetadataStep(ErrorLogMetadataExtractor(eqpid, logger)),
            SaveEquipmentInfoStep(uploader, time_sync, eqpid),
            ParseRowsStep(parser, logger),
            ReconcileTimeStep(reconciler, parser.timestamp_column),
            FilterAllowedStep(AllowListFilter(ErrorSeverityRepository(), logger), logger),
            CopyRowsStep(uploader, ERROR_TABLE, ERROR_COLUMN_TYPES),
            delete,
        ]
    elif log_format is LogFormat.PREALIGN:
        parser = PrealignRowParser(eqpid, logger)
        steps = [
            WaitForFileStep(file_loader, PREALIGN_READY_POLICY, logger),
            read,
            ParseRowsStep(parser, logger),
            ReconcileTimeStep(reconciler, parser.timestamp_column),
            InsertRowsStep(uploader, PREALIGN_TABLE, PREALIGN_NATURAL_KEY),
            delete,
        ]
    else:
        raise ValueError(f"Unknown log format '{log_format}'")
    return Processor(steps=steps, logger=logger)


class IngestPlugin:
    """Host-facing entry for one log format.

    Each ``execute`` call gets its own logger and processor, so concurrent
    calls for different files share nothing but the connection pool.
    """

    def __init__(
        self,
        log_format: LogFormat,
        settings: Settings,
        time_sync: BaseTimeSync,
    ) -> None:
        self.log_format = log_format
        self.name = PLUGIN_NAMES[log_format]
        self._settings = settings
        self._time_sync = time_sync
        self._debug_enabled = settings.debug_mode

    def set_debug_mode(self, enabled: bool) -> None:
        self._debug_enabled = enabled

    def execute(self, file_path: Path | str) -> IngestOutcome:
        """Ingest one file. Never raises; setup failures return FAILED."""
        log_dir = Path(self._settings.log_dir) if self._settings.log_dir else None
        try:
            with IngestLogger(
                self.name, debug_enabled=self._debug_enabled, log_dir=log_dir
            ) as logger:
                processor = build_processor(
                    self.log_format, self._settings, self._time_sync, logger
                )
                return processor.process(file_path)
        except Exception as exc:
            Log.error(
                f"[{self.name}] Failed to run ingest for {file_path}: {exc}",
                exc_info=True,
            )
            return IngestOutcome.FAILED
