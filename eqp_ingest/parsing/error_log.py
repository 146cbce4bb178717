import re

from eqp_ingest.logging.logger import IngestLogger
from eqp_ingest.parsing.base import BaseRowParser
from eqp_ingest.parsing.cells import is_int32
from eqp_ingest.parsing.models import MetadataRecord, NormalizedRow, ParseResult
from eqp_ingest.parsing.timestamps import ERROR_LOG_TIMESTAMP_FORMAT, parse_exact

ERROR_LINE_RE = re.compile(
    r"^(?P<id>\w+),\s*(?P<ts>[^,]+),\s*(?P<label>[^,]+),\s*(?P<desc>[^,]+),"
    r"\s*(?P<ms>\d+)(?:,\s*(?P<extra>.*))?"
)


class ErrorLogRowParser(BaseRowParser):
    """Parses ``id, timestamp, label, description, ms[, extra]`` event lines.

    Lines that do not match the grammar (headers, banners) are skipped
    silently. An unparsable timestamp keeps the row with ``time_stamp`` None.
    """

    timestamp_column = "time_stamp"

    def __init__(self, eqpid: str, logger: IngestLogger) -> None:
        self._eqpid = eqpid
        self._logger = logger

    def parse(self, lines: list[str], metadata: MetadataRecord) -> ParseResult:
        rows: list[NormalizedRow] = []
        for line in lines:
            match = ERROR_LINE_RE.match(line)
            if match is None:
                continue
            ms = match.group("ms")
            rows.append(
                {
                    "eqpid": self._eqpid,
                    "error_id": match.group("id").strip(),
                    "time_stamp": parse_exact(
                        match.group("ts").strip(), (ERROR_LOG_TIMESTAMP_FORMAT,)
                    ),
                    "error_label": match.group("label").strip(),
                    "error_desc": match.group("desc").strip(),
                    "millisecond": int(ms) if is_int32(ms) else None,
                    "extra_message_1": (match.group("extra") or "").strip(),
                    "extra_message_2": "",
                }
            )
        self._logger.debug(f"Matched {len(rows)} error lines out of {len(lines)}.")
        return ParseResult(rows=rows)
