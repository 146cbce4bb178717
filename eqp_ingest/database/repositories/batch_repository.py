from collections.abc import Sequence

from psycopg import sql

from eqp_ingest.database.connection import get_connection
from eqp_ingest.processor.models import UploadBatch

SCHEMA = "public"


def _table(name: str) -> sql.Identifier:
    return sql.Identifier(SCHEMA, name)


def _column_list(columns: Sequence[str]) -> sql.Composable:
    return sql.SQL(",").join(sql.Identifier(c) for c in columns)


def build_insert_query(
    batch: UploadBatch,
    conflict_target: Sequence[str] | None = None,
) -> sql.Composed:
    """``INSERT ... ON CONFLICT [(target)] DO NOTHING`` for one batch row."""
    target = (
        sql.SQL("({})").format(_column_list(conflict_target))
        if conflict_target
        else sql.SQL("")
    )
    return sql.SQL(
        "INSERT INTO {table} ({columns}) VALUES ({values}) ON CONFLICT {target} DO NOTHING"
    ).format(
        table=_table(batch.table),
        columns=_column_list(batch.columns),
        values=sql.SQL(",").join(sql.Placeholder() * len(batch.columns)),
        target=target,
    )


def build_copy_query(batch: UploadBatch) -> sql.Composed:
    return sql.SQL("COPY {table} ({columns}) FROM STDIN (FORMAT BINARY)").format(
        table=_table(batch.table),
        columns=_column_list(batch.columns),
    )


class BatchRepository:
    """Writes measurement batches into the plg_* tables."""

    def insert_rows(
        self,
        batch: UploadBatch,
        conflict_target: Sequence[str] | None = None,
    ) -> int:
        """Insert every row in one transaction, skipping natural-key conflicts.

        Returns the number of rows that were actually stored. On any error the
        whole batch is rolled back and the error re-raised.
        """
        query = build_insert_query(batch, conflict_target)
        inserted = 0
        with get_connection() as conn:
            try:
                with conn.cursor() as cur:
                    for values in batch.rows:
                        cur.execute(query, values)
                        inserted += max(cur.rowcount, 0)
                conn.commit()
            except Exception:
                conn.rollback()
                raise
        return inserted

    def copy_rows(self, batch: UploadBatch) -> int:
        """Stream all rows through a binary COPY in one transaction.

        Raises:
            psycopg.errors.UniqueViolation: if the batch was already stored.
        """
        if not batch.column_types:
            raise ValueError("Binary COPY needs column_types on the batch")
        with get_connection() as conn:
            try:
                with conn.cursor() as cur:
                    with cur.copy(build_copy_query(batch)) as copy:
                        copy.set_types(list(batch.column_types))
                        for values in batch.rows:
                            copy.write_row(values)
                conn.commit()
            except Exception:
                conn.rollback()
                raise
        return len(batch.rows)
