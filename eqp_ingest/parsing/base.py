from abc import ABC, abstractmethod

from eqp_ingest.parsing.models import MetadataRecord, ParseResult


class BaseRowParser(ABC):
    """Contract for all equipment log row parsers."""

    #: Column holding the equipment-local timestamp of each row.
    timestamp_column: str = "datetime"

    @abstractmethod
    def parse(self, lines: list[str], metadata: MetadataRecord) -> ParseResult:
        """Turn the body lines of one file into normalized rows.

        Args:
            lines: Non-empty lines of the file, in order.
            metadata: Header values extracted from the same file.

        Returns:
            ParseResult with one row per accepted data line.

        Raises:
            HeaderNotFoundError: if a tabular file has no header line.
        """
