from collections.abc import Sequence
from datetime import datetime

# Error-log event times, e.g. "14-Sep-23 2:05:30 PM".
ERROR_LOG_TIMESTAMP_FORMAT = "%d-%b-%y %I:%M:%S %p"
# Error-log header DATE, e.g. "9/14/2023 14:5:30", rewritten to DB_TEXT_FORMAT.
ERROR_LOG_HEADER_DATE_FORMAT = "%m/%d/%Y %H:%M:%S"
DB_TEXT_FORMAT = "%Y-%m-%d %H:%M:%S"
# Pre-align times, e.g. "09-14-23 14:05:30" or "9-4-23 14:05:30".
PREALIGN_TIMESTAMP_FORMATS = ("%m-%d-%y %H:%M:%S",)

# Culture-neutral layouts accepted when no exact format is prescribed.
GENERAL_TIMESTAMP_FORMATS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
    "%m-%d-%Y %H:%M:%S",
    "%m-%d-%y %H:%M",
    "%d-%b-%Y %H:%M:%S",
    "%d %b %Y %H:%M:%S",
)


def parse_exact(text: str | None, formats: Sequence[str]) -> datetime | None:
    """Parse ``text`` against each format in order; None if none match."""
    if not text:
        return None
    value = " ".join(text.split())
    for fmt in formats:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def parse_general(text: str | None) -> datetime | None:
    """Parse a timestamp written in any of the common culture-neutral layouts."""
    parsed = parse_exact(text, GENERAL_TIMESTAMP_FORMATS)
    if parsed is not None or not text:
        return parsed
    try:
        return datetime.fromisoformat(text.strip())
    except ValueError:
        return None


def truncate_to_seconds(value: datetime) -> datetime:
    """Drop sub-second precision and time zone, keeping wall-clock fields."""
    return datetime(
        value.year, value.month, value.day, value.hour, value.minute, value.second
    )
