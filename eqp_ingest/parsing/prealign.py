import re
from datetime import datetime

from eqp_ingest.logging.logger import IngestLogger
from eqp_ingest.parsing.base import BaseRowParser
from eqp_ingest.parsing.cells import parse_decimal
from eqp_ingest.parsing.models import MetadataRecord, NormalizedRow, ParseResult
from eqp_ingest.parsing.timestamps import (
    PREALIGN_TIMESTAMP_FORMATS,
    parse_exact,
    parse_general,
)

PREALIGN_LINE_RE = re.compile(
    r"Xmm\s*([-\d.]+)\s*Ymm\s*([-\d.]+)\s*Notch\s*([-\d.]+)\s*Time\s*([\d\-:\s]+)",
    re.IGNORECASE,
)


def parse_prealign_time(text: str) -> datetime | None:
    return parse_exact(text, PREALIGN_TIMESTAMP_FORMATS) or parse_general(text)


class PrealignRowParser(BaseRowParser):
    """Parses ``Xmm <x> Ymm <y> Notch <n> Time <datetime>`` coordinate lines.

    Coordinates stay ``Decimal`` so stored values match the log exactly.
    """

    timestamp_column = "datetime"

    def __init__(self, eqpid: str, logger: IngestLogger) -> None:
        self._eqpid = eqpid
        self._logger = logger

    def parse(self, lines: list[str], metadata: MetadataRecord) -> ParseResult:
        rows: list[NormalizedRow] = []
        skipped = 0
        for line in lines:
            match = PREALIGN_LINE_RE.search(line)
            if match is None:
                continue
            timestamp = parse_prealign_time(match.group(4))
            x = parse_decimal(match.group(1))
            y = parse_decimal(match.group(2))
            notch = parse_decimal(match.group(3))
            if timestamp is None or x is None or y is None or notch is None:
                self._logger.debug(f"Skipping unparsable pre-align line: {line.strip()}")
                skipped += 1
                continue
            rows.append(
                {
                    "eqpid": self._eqpid,
                    "datetime": timestamp,
                    "xmm": x,
                    "ymm": y,
                    "notch": notch,
                }
            )
        return ParseResult(rows=rows, skipped_lines=skipped)
