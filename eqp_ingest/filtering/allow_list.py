"""Error-id allow-list filter.

The allow-list lives in ``err_severity_map`` and is re-read on every call so
edits to the table apply to the next file. If it cannot be read the filter
denies every row for that call rather than letting unknown errors through.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from eqp_ingest.database.repositories.error_severity_repository import (
    ErrorSeverityRepository,
)
from eqp_ingest.logging.logger import IngestLogger
from eqp_ingest.parsing.models import NormalizedRow


@dataclass(frozen=True)
class AllowedIdSet:
    """Case-insensitive set of permitted error ids."""

    ids: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, ids: Iterable[str]) -> "AllowedIdSet":
        return cls(frozenset(i.strip().casefold() for i in ids))

    def contains(self, error_id: object) -> bool:
        if error_id is None:
            return False
        return str(error_id).strip().casefold() in self.ids

    def __len__(self) -> int:
        return len(self.ids)


@dataclass(frozen=True)
class FilterResult:
    rows: list[NormalizedRow]
    matched: int
    skipped: int
    degraded: bool = False

    @property
    def total(self) -> int:
        return self.matched + self.skipped


def filter_rows(
    rows: list[NormalizedRow],
    allowed: AllowedIdSet,
    id_column: str = "error_id",
) -> FilterResult:
    """Keep rows whose id is in ``allowed``. An empty set keeps nothing."""
    kept = [row for row in rows if allowed.contains(row.get(id_column))]
    return FilterResult(rows=kept, matched=len(kept), skipped=len(rows) - len(kept))


class AllowListFilter:
    """Drops error rows whose id is not configured in err_severity_map."""

    def __init__(self, repository: ErrorSeverityRepository, logger: IngestLogger) -> None:
        self._repository = repository
        self._logger = logger

    def load(self) -> tuple[AllowedIdSet, bool]:
        """Query the allow-list. Returns (set, degraded)."""
        try:
            return AllowedIdSet.of(self._repository.load_error_ids()), False
        except Exception as exc:
            self._logger.error(
                f"Failed to load allowed error IDs from DB, denying all rows: {exc}",
                exc_info=True,
            )
            return AllowedIdSet(), True

    def apply(self, rows: list[NormalizedRow]) -> FilterResult:
        allowed, degraded = self.load()
        self._logger.debug(f"Loaded {len(allowed)} allowed error IDs.")
        result = filter_rows(rows, allowed)
        if degraded:
            return FilterResult(result.rows, result.matched, result.skipped, degraded=True)
        return result
