from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from eqp_ingest.filtering.allow_list import FilterResult
from eqp_ingest.parsing.models import MetadataRecord, NormalizedRow
from eqp_ingest.processor.models import IngestOutcome, UploadResult, UploadStatus


@dataclass(slots=True)
class PipelineContext:
    path: Path
    lines: list[str] = field(default_factory=list)
    metadata: MetadataRecord = field(default_factory=MetadataRecord)
    rows: list[NormalizedRow] = field(default_factory=list)
    skipped_lines: int = 0
    filter_result: FilterResult | None = None
    upload_result: UploadResult | None = None
    equipment_info_written: bool = False
    source_deleted: bool = False
    # Set by a step to stop the pipeline early.
    outcome: IngestOutcome | None = None

    def stop(self, outcome: IngestOutcome) -> "PipelineContext":
        self.outcome = outcome
        return self

    def final_outcome(self) -> IngestOutcome:
        if self.outcome is not None:
            return self.outcome
        if self.upload_result is None:
            return IngestOutcome.NO_ROWS
        if self.upload_result.status is UploadStatus.DUPLICATE:
            return IngestOutcome.DUPLICATE
        if self.upload_result.status is UploadStatus.FAILED:
            return IngestOutcome.FAILED
        return IngestOutcome.UPLOADED


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
