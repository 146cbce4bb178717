"""Wafer-flat metrology report parser.

A report is a ``key: value`` header block followed by a comma separated
table whose first line starts with ``Point#``. Every table row becomes one
row of ``plg_wf_flat``, carrying the file's recipe/lot/wafer metadata.
"""

from typing import ClassVar

from eqp_ingest.logging.logger import IngestLogger
from eqp_ingest.parsing.base import BaseRowParser
from eqp_ingest.parsing.cells import classify_cell
from eqp_ingest.parsing.headers import build_header_map, normalize_header
from eqp_ingest.parsing.metadata import WaferFlatMetadataExtractor
from eqp_ingest.parsing.models import MetadataRecord, NormalizedRow, ParseResult
from eqp_ingest.processor.exceptions import HeaderNotFoundError

HEADER_MARKER = "point#"


def find_header_index(lines: list[str]) -> int:
    """Index of the first line starting with ``Point#``, or -1."""
    for index, line in enumerate(lines):
        if line.lstrip().lower().startswith(HEADER_MARKER):
            return index
    return -1


class WaferFlatRowParser(BaseRowParser):
    """Header-driven parser with per-cell type inference."""

    timestamp_column = "datetime"

    INTEGER_COLUMNS: ClassVar[frozenset[str]] = frozenset(
        {"point", "dierow", "diecol", "dienum", "diepointtag"}
    )

    # Output column -> metadata key.
    METADATA_COLUMNS: ClassVar[dict[str, str]] = {
        "cassettercp": "Cassette Recipe Name",
        "stagercp": "Stage Recipe Name",
        "stagegroup": "Stage Group Name",
        "lotid": "Lot ID",
    }

    def __init__(self, eqpid: str, logger: IngestLogger) -> None:
        self._eqpid = eqpid
        self._logger = logger

    def parse(self, lines: list[str], metadata: MetadataRecord) -> ParseResult:
        header_index = find_header_index(lines)
        if header_index == -1:
            raise HeaderNotFoundError("Header row starting with 'Point#' not found")
        self._logger.debug(f"Header found at line index {header_index}.")

        headers = [normalize_header(h) for h in lines[header_index].split(",")]
        header_map = build_header_map(headers)
        self._logger.debug(f"Normalized headers: {', '.join(headers)}")

        fixed = self._fixed_columns(metadata)
        rows: list[NormalizedRow] = []
        skipped = 0
        for line_no, line in enumerate(lines[header_index + 1:], start=header_index + 2):
            if not line.strip():
                continue
            values = [v.strip() for v in line.split(",")]
            if len(values) < len(headers):
                self._logger.debug(
                    f"Skipping line {line_no} due to insufficient column count "
                    f"({len(values)}/{len(headers)})."
                )
                skipped += 1
                continue

            row: NormalizedRow = dict(fixed)
            for name, index in header_map.items():
                cell = classify_cell(values[index], name in self.INTEGER_COLUMNS)
                row[name] = cell.value
            row["eqpid"] = self._eqpid
            rows.append(row)
        return ParseResult(rows=rows, skipped_lines=skipped)

    def _fixed_columns(self, metadata: MetadataRecord) -> NormalizedRow:
        fixed: NormalizedRow = {
            column: metadata.get(key) for column, key in self.METADATA_COLUMNS.items()
        }
        fixed["waferid"] = WaferFlatMetadataExtractor.wafer_number(metadata)
        fixed["datetime"] = WaferFlatMetadataExtractor.measured_at(metadata)
        fixed["film"] = metadata.get("Film Name")
        return fixed
