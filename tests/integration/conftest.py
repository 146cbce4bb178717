import os
import uuid
from collections.abc import Callable, Generator
from typing import Any

import psycopg
import pytest
from psycopg import sql

from eqp_ingest.config.settings import Settings
from eqp_ingest.database.connection import close_pool, get_connection, init_pool

_DDL = (
    """
    CREATE TABLE IF NOT EXISTS public.plg_wf_flat (
        cassettercp varchar, stagercp varchar, stagegroup varchar, lotid varchar,
        waferid integer, "datetime" timestamp, film varchar,
        point integer, x double precision, y double precision,
        diex double precision, diey double precision,
        thickness_nocal double precision, gof double precision,
        diepointtag integer, eqpid varchar, serv_ts timestamp
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS public.plg_prealign (
        eqpid varchar NOT NULL, "datetime" timestamp NOT NULL,
        xmm numeric, ymm numeric, notch numeric, serv_ts timestamp,
        PRIMARY KEY (eqpid, "datetime")
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS public.plg_error (
        eqpid varchar NOT NULL, error_id varchar NOT NULL, time_stamp timestamp,
        error_label varchar, error_desc varchar, millisecond integer,
        extra_message_1 varchar, extra_message_2 varchar, serv_ts timestamp,
        UNIQUE (eqpid, error_id, time_stamp)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS public.itm_info (
        eqpid varchar PRIMARY KEY, system_name varchar, system_model varchar,
        serial_num varchar, application varchar, version varchar,
        db_version varchar, "date" timestamp, serv_ts timestamp
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS public.err_severity_map (
        error_id varchar PRIMARY KEY, severity varchar
    )
    """,
)

_EQPID_TABLES = ("plg_wf_flat", "plg_prealign", "plg_error", "itm_info")


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "itm_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            with conn.cursor() as cur:
                for statement in _DDL:
                    cur.execute(statement)
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def test_eqpid(integration_pool: None) -> Generator[str, None, None]:
    """Unique equipment id; every row written under it is removed afterwards."""
    eqpid = f"ITEST_{uuid.uuid4().hex[:8].upper()}"
    yield eqpid
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table in _EQPID_TABLES:
                cur.execute(
                    sql.SQL("DELETE FROM {} WHERE eqpid = %s").format(
                        sql.Identifier("public", table)
                    ),
                    (eqpid,),
                )
        conn.commit()


@pytest.fixture
def seed_error_ids(
    db_conn: psycopg.Connection[Any],
) -> Generator[list[str], None, None]:
    suffix = uuid.uuid4().hex[:6].upper()
    ids = [f"ITEST{suffix}A", f"ITEST{suffix}B"]
    with db_conn.cursor() as cur:
        for error_id in ids:
            cur.execute(
                "INSERT INTO public.err_severity_map (error_id) VALUES (%s)",
                (error_id,),
            )
    db_conn.commit()
    try:
        yield ids
    finally:
        with db_conn.cursor() as cur:
            cur.execute(
                "DELETE FROM public.err_severity_map WHERE error_id = ANY(%s)", (ids,)
            )
        db_conn.commit()


@pytest.fixture
def row_count(db_conn: psycopg.Connection[Any]) -> Callable[[str, str], int]:
    """Return a counter of rows stored under one eqpid in a table."""

    def _count(table: str, eqpid: str) -> int:
        with db_conn.cursor() as cur:
            cur.execute(
                sql.SQL("SELECT count(*) FROM {} WHERE eqpid = %s").format(
                    sql.Identifier("public", table)
                ),
                (eqpid,),
            )
            row = cur.fetchone()
        db_conn.commit()
        assert row is not None
        return int(row[0])

    return _count
