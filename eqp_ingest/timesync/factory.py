from eqp_ingest.config.settings import Settings
from eqp_ingest.timesync.base import BaseTimeSync
from eqp_ingest.timesync.offset_adapter import OffsetTimeSync


class TimeSyncFactory:
    """Creates the configured time synchronization adapter."""

    PROVIDERS: tuple[str, ...] = ("offset",)

    @classmethod
    def create(cls, settings: Settings) -> BaseTimeSync:
        provider = settings.time_sync_provider.lower()
        if provider == "offset":
            return OffsetTimeSync(
                equipment_timezone=settings.equipment_timezone,
                reference_timezone=settings.reference_timezone,
                offset_seconds=settings.clock_offset_seconds,
            )
        raise ValueError(
            f"Unknown time sync provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )
