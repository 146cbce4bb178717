from eqp_ingest.database.connection import get_connection


class ErrorSeverityRepository:
    """Reads the err_severity_map reference table."""

    def load_error_ids(self) -> list[str]:
        """Return every configured error id, trimmed, NULLs dropped."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT error_id FROM public.err_severity_map")
                rows = cur.fetchall()
        return [str(row[0]).strip() for row in rows if row[0] is not None]
