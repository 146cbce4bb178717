"""Bounded retry policy for file access.

Lock waits and timed reads share one policy object so tests can drive the
loop with a fake clock and a recording sleep instead of real timing.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class RetryPolicy:
    """Limits for a retry loop.

    ``max_attempts`` bounds attempt-counted loops, ``timeout_seconds`` bounds
    elapsed-time loops. ``delay_seconds`` is the pause between attempts.
    """

    max_attempts: int = 20
    delay_seconds: float = 0.5
    timeout_seconds: float = 30.0
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False, repr=False)
    clock: Callable[[], float] = field(default=time.monotonic, compare=False, repr=False)

    def with_delay(self, delay_seconds: float) -> "RetryPolicy":
        return replace(self, delay_seconds=delay_seconds)

    def with_timeout(self, timeout_seconds: float) -> "RetryPolicy":
        return replace(self, timeout_seconds=timeout_seconds)

    def start(self) -> "RetryDeadline":
        return RetryDeadline(self, self.clock())


@dataclass
class RetryDeadline:
    """Elapsed-time budget started from a policy."""

    policy: RetryPolicy
    started_at: float

    @property
    def elapsed(self) -> float:
        return self.policy.clock() - self.started_at

    def expired(self) -> bool:
        return self.elapsed > self.policy.timeout_seconds

    def pause(self) -> None:
        self.policy.sleep(self.policy.delay_seconds)


# Lock-wait limits per format; reads retry every 250ms up to the timeout.
WAFER_FLAT_READY_POLICY = RetryPolicy(max_attempts=20, delay_seconds=0.5)
ERROR_LOG_READY_POLICY = RetryPolicy(max_attempts=20, delay_seconds=0.5)
PREALIGN_READY_POLICY = RetryPolicy(max_attempts=10, delay_seconds=0.3)
READ_RETRY_DELAY_SECONDS = 0.25
