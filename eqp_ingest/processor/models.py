from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from eqp_ingest.parsing.models import NormalizedRow


@dataclass(frozen=True)
class UploadBatch:
    """Rows bound for one table, laid out over one shared column list.

    ``column_types`` holds PostgreSQL type names, in column order, for the
    binary COPY channel; it stays empty for row-by-row inserts.
    """

    table: str
    columns: tuple[str, ...]
    rows: tuple[tuple[object, ...], ...]
    column_types: tuple[str, ...] = ()

    @classmethod
    def from_rows(
        cls,
        table: str,
        rows: Sequence[NormalizedRow],
        column_types: dict[str, str] | None = None,
    ) -> "UploadBatch":
        """Build a batch whose columns are the union of all row keys.

        Column order follows first appearance; missing cells become None.
        With ``column_types`` the column list is taken from its keys instead.
        """
        if column_types is not None:
            columns = tuple(column_types)
        else:
            seen: dict[str, None] = {}
            for row in rows:
                for key in row:
                    seen.setdefault(key, None)
            columns = tuple(seen)
        values = tuple(tuple(row.get(column) for column in columns) for row in rows)
        types = tuple(column_types[c] for c in columns) if column_types else ()
        return cls(table=table, columns=columns, rows=values, column_types=types)

    def __len__(self) -> int:
        return len(self.rows)


class UploadStatus(str, Enum):
    STORED = "stored"
    DUPLICATE = "duplicate"
    FAILED = "failed"


@dataclass(frozen=True)
class UploadResult:
    """Outcome of persisting one batch."""

    table: str
    status: UploadStatus
    inserted: int = 0
    total: int = 0
    error: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status is not UploadStatus.FAILED


class IngestOutcome(str, Enum):
    """Final state of one file-processing invocation."""

    UPLOADED = "uploaded"
    DUPLICATE = "duplicate"
    NO_ROWS = "no_rows"
    SKIPPED_LOCKED = "skipped_locked"
    MALFORMED = "malformed"
    FAILED = "failed"

    @property
    def is_failure(self) -> bool:
        return self is IngestOutcome.FAILED
