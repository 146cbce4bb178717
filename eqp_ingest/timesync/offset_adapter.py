from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from eqp_ingest.timesync.base import BaseTimeSync


class OffsetTimeSync(BaseTimeSync):
    """Applies a measured clock offset and converts into the reference zone."""

    def __init__(
        self,
        equipment_timezone: str,
        reference_timezone: str,
        offset_seconds: float = 0.0,
    ) -> None:
        self._equipment_tz = ZoneInfo(equipment_timezone)
        self._reference_tz = ZoneInfo(reference_timezone)
        self._offset = timedelta(seconds=offset_seconds)

    def to_synchronized(self, local: datetime) -> datetime:
        if local.tzinfo is None:
            local = local.replace(tzinfo=self._equipment_tz)
        return (local + self._offset).astimezone(self._reference_tz)
