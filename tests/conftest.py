from datetime import datetime, timedelta
from pathlib import Path

import pytest

from eqp_ingest.logging.logger import IngestLogger
from eqp_ingest.timesync.base import BaseTimeSync

WAFER_FLAT_TEXT = (
    "Cassette Recipe Name: CAS_RCP_01\r\n"
    "Stage Recipe Name: STG_RCP_A\r\n"
    "Stage Group Name: GROUP1\r\n"
    "Lot ID: LOT123\r\n"
    "Wafer ID: LOT123-W07\r\n"
    "Date and Time: 09/14/2023 14:05:30\r\n"
    "Film Name: OXIDE\r\n"
    "\r\n"
    "Point#,X (mm),Y (mm),Die X,Die Y,Thickness (no cal.),GOF,DiePointTag\r\n"
    "1,0.000,0.000,0,0,1023.5,0.998,5\r\n"
    "2,10.500,-3.250,1,-1,1019.2,0.997,6\r\n"
    "3,20.000,5.000\r\n"
    "4,-10.000,7.125,-1,1,,n/a,7\r\n"
)

ERROR_LOG_TEXT = (
    "EXPORT_TYPE:,ERROR\n"
    "SYSTEM_NAME:,ATLAS-01\n"
    "SYSTEM_MODEL:,A300\n"
    "SERIAL_NUM:,SN-0042\n"
    "APPLICATION:,Metrology\n"
    "VERSION:,7.2.1\n"
    "DB_VERSION:,19\n"
    "DATE:,9/14/2023 14:5:30\n"
    "ERROR_ID,TIME_STAMP,LABEL,DESCRIPTION,MILLISECOND,EXTRA\n"
    "E1001, 14-Sep-23 2:05:30 PM, LabelX, Something failed, 250, extra info\n"
    "E2002, 14-Sep-23 2:06:00 PM, LabelY, Stage timeout, 10\n"
    "E3003, not-a-date, LabelZ, Door open, 0\n"
)

PREALIGN_TEXT = (
    "Xmm 12.500 Ymm -3.250 Notch 0.010 Time 09-14-23 14:05:30\n"
    "Xmm 1.000 Ymm 2.000 Notch 0.500 Time 9-4-23 08:00:01\n"
    "garbage line\n"
    "Xmm 1.2.3 Ymm 2.000 Notch 0.500 Time 09-14-23 14:06:00\n"
)


class FakeTimeSync(BaseTimeSync):
    """Shifts timestamps by a fixed offset and records every call."""

    def __init__(self, offset: timedelta = timedelta(hours=1, microseconds=750000)) -> None:
        self.offset = offset
        self.calls: list[datetime] = []

    def to_synchronized(self, local: datetime) -> datetime:
        self.calls.append(local)
        return local + self.offset


@pytest.fixture()
def logger() -> IngestLogger:
    return IngestLogger("Test", debug_enabled=True)


@pytest.fixture()
def time_sync() -> FakeTimeSync:
    return FakeTimeSync()


@pytest.fixture()
def wafer_flat_file(tmp_path: Path) -> Path:
    path = tmp_path / "wafer_flat.csv"
    path.write_text(WAFER_FLAT_TEXT, encoding="cp949")
    return path


@pytest.fixture()
def error_log_file(tmp_path: Path) -> Path:
    path = tmp_path / "error.log"
    path.write_text(ERROR_LOG_TEXT, encoding="cp949")
    return path


@pytest.fixture()
def prealign_file(tmp_path: Path) -> Path:
    path = tmp_path / "prealign.log"
    path.write_text(PREALIGN_TEXT, encoding="cp949")
    return path
