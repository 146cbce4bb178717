from eqp_ingest.parsing.models import NormalizedRow
from eqp_ingest.parsing.timestamps import truncate_to_seconds
from eqp_ingest.timesync.base import BaseTimeSync

SERVER_TIMESTAMP_COLUMN = "serv_ts"


class TimeReconciler:
    """Stamps rows with the synchronized server time of their local timestamp."""

    def __init__(self, time_sync: BaseTimeSync) -> None:
        self._time_sync = time_sync

    def reconcile(self, rows: list[NormalizedRow], source_column: str) -> int:
        """Set ``serv_ts`` on every row from ``source_column``.

        Rows without a local timestamp get ``serv_ts`` None. Returns the
        number of rows that received a synchronized timestamp.
        """
        reconciled = 0
        for row in rows:
            local = row.get(source_column)
            if local is None:
                row[SERVER_TIMESTAMP_COLUMN] = None
                continue
            row[SERVER_TIMESTAMP_COLUMN] = truncate_to_seconds(
                self._time_sync.to_synchronized(local)  # type: ignore[arg-type]
            )
            reconciled += 1
        return reconciled
