from psycopg.rows import dict_row

from eqp_ingest.database.connection import get_connection
from eqp_ingest.database.models import EquipmentInfoRecord


class EquipmentInfoRepository:
    """Database operations for the itm_info table."""

    def find_by_eqpid(self, eqpid: str) -> EquipmentInfoRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT eqpid, system_name, system_model, serial_num,
                           application, version, db_version, "date", serv_ts
                    FROM public.itm_info
                    WHERE eqpid = %s
                    """,
                    (eqpid,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return EquipmentInfoRecord(
            eqpid=row["eqpid"],
            system_name=row["system_name"],
            system_model=row["system_model"],
            serial_num=row["serial_num"],
            application=row["application"],
            version=row["version"],
            db_version=row["db_version"],
            date=row["date"],
            serv_ts=row["serv_ts"],
        )

    def upsert(self, record: EquipmentInfoRecord) -> None:
        """Insert the record or overwrite every descriptor field of the stored one."""
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO public.itm_info
                    (eqpid, system_name, system_model, serial_num,
                     application, version, db_version, "date", serv_ts)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                ON CONFLICT (eqpid) DO UPDATE SET
                    system_name = EXCLUDED.system_name,
                    system_model = EXCLUDED.system_model,
                    serial_num = EXCLUDED.serial_num,
                    application = EXCLUDED.application,
                    version = EXCLUDED.version,
                    db_version = EXCLUDED.db_version,
                    "date" = EXCLUDED."date",
                    serv_ts = EXCLUDED.serv_ts
                """,
                (
                    record.eqpid,
                    record.system_name,
                    record.system_model,
                    record.serial_num,
                    record.application,
                    record.version,
                    record.db_version,
                    record.date,
                    record.serv_ts,
                ),
            )
            conn.commit()
