from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar


@dataclass
class EquipmentInfoRecord:
    """Represents a row from the itm_info table (one per equipment)."""

    eqpid: str
    system_name: str | None = None
    system_model: str | None = None
    serial_num: str | None = None
    application: str | None = None
    version: str | None = None
    db_version: str | None = None
    date: datetime | None = None
    serv_ts: datetime | None = None

    DESCRIPTOR_FIELDS: ClassVar[tuple[str, ...]] = (
        "system_name",
        "system_model",
        "serial_num",
        "application",
        "version",
        "db_version",
    )

    def same_descriptor(self, other: "EquipmentInfoRecord") -> bool:
        """True when both records describe the device identically."""
        return self.eqpid == other.eqpid and all(
            getattr(self, name) == getattr(other, name) for name in self.DESCRIPTOR_FIELDS
        )
