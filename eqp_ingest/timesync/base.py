from abc import ABC, abstractmethod
from datetime import datetime


class BaseTimeSync(ABC):
    """Contract for the clock synchronization service."""

    @abstractmethod
    def to_synchronized(self, local: datetime) -> datetime:
        """Translate an equipment-local timestamp into the reference clock.

        Args:
            local: Naive timestamp as written by the equipment.

        Returns:
            The same instant expressed in the synchronized reference time zone.
        """
