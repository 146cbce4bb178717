from eqp_ingest.parsing.base import BaseRowParser
from eqp_ingest.parsing.error_log import ErrorLogRowParser
from eqp_ingest.parsing.metadata import (
    ErrorLogMetadataExtractor,
    MetadataExtractor,
    WaferFlatMetadataExtractor,
)
from eqp_ingest.parsing.models import MetadataRecord, NormalizedRow, ParseResult
from eqp_ingest.parsing.prealign import PrealignRowParser
from eqp_ingest.parsing.wafer_flat import WaferFlatRowParser

__all__ = [
    "BaseRowParser",
    "ErrorLogMetadataExtractor",
    "ErrorLogRowParser",
    "MetadataExtractor",
    "MetadataRecord",
    "NormalizedRow",
    "ParseResult",
    "PrealignRowParser",
    "WaferFlatMetadataExtractor",
    "WaferFlatRowParser",
]
