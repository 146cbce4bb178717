import re
from collections.abc import Iterable
from datetime import datetime

from eqp_ingest.logging.logger import IngestLogger
from eqp_ingest.parsing.cells import is_int32
from eqp_ingest.parsing.models import MetadataRecord
from eqp_ingest.parsing.timestamps import (
    DB_TEXT_FORMAT,
    ERROR_LOG_HEADER_DATE_FORMAT,
    parse_exact,
    parse_general,
)

_WAFER_NUMBER_RE = re.compile(r"W(\d+)")


class MetadataExtractor:
    """Collects ``key<delimiter>value`` header lines into a MetadataRecord."""

    delimiter: str = ":"

    def __init__(self, logger: IngestLogger | None = None) -> None:
        self._logger = logger

    def extract(self, lines: Iterable[str]) -> MetadataRecord:
        meta = MetadataRecord()
        for line in lines:
            idx = line.find(self.delimiter)
            if idx <= 0:
                continue
            key = line[:idx].strip()
            value = line[idx + len(self.delimiter):].strip()
            if not key or not self.accept_key(key):
                continue
            if meta.add(key, value) and self._logger is not None:
                self._logger.debug(f"Parsed metadata: '{key}' = '{value}'")
        self.post_process(meta)
        return meta

    def accept_key(self, key: str) -> bool:
        return True

    def post_process(self, meta: MetadataRecord) -> None:
        """Hook for format-specific rewrites after all lines are read."""


class WaferFlatMetadataExtractor(MetadataExtractor):
    """Header block of wafer-flat metrology reports (``Lot ID: ...``)."""

    delimiter = ":"

    @staticmethod
    def wafer_number(meta: MetadataRecord) -> int | None:
        """Wafer number from ``Wafer ID``, e.g. ``LOT123-W07`` -> 7."""
        wafer_id = meta.get("Wafer ID")
        if not wafer_id:
            return None
        match = _WAFER_NUMBER_RE.search(wafer_id)
        if match is None or not is_int32(match.group(1)):
            return None
        return int(match.group(1))

    @staticmethod
    def measured_at(meta: MetadataRecord) -> datetime | None:
        """``Date and Time`` header as a datetime, or None if unparsable."""
        return parse_general(meta.get("Date and Time"))


class ErrorLogMetadataExtractor(MetadataExtractor):
    """Header block of error logs (``SYSTEM_NAME:,value``)."""

    delimiter = ":,"

    def __init__(self, default_eqpid: str, logger: IngestLogger | None = None) -> None:
        super().__init__(logger)
        self._default_eqpid = default_eqpid

    def accept_key(self, key: str) -> bool:
        return key.casefold() != "export_type"

    def post_process(self, meta: MetadataRecord) -> None:
        date = parse_exact(meta.get("DATE"), (ERROR_LOG_HEADER_DATE_FORMAT,))
        if date is not None:
            meta.replace("DATE", date.strftime(DB_TEXT_FORMAT))
        meta.add("EqpId", self._default_eqpid)
