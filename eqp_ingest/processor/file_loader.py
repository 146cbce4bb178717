import errno
from pathlib import Path

from eqp_ingest.processor.exceptions import FileReadTimeoutError
from eqp_ingest.processor.retry import READ_RETRY_DELAY_SECONDS, RetryPolicy

# Windows sharing/lock violations surface as OSError with these winerror codes.
_WINDOWS_LOCK_ERRORS = {32, 33}
_LOCK_ERRNOS = {errno.EAGAIN, errno.EBUSY}


def is_lock_error(exc: OSError) -> bool:
    """True when an OSError means another process holds the file."""
    if isinstance(exc, (FileNotFoundError, IsADirectoryError, NotADirectoryError)):
        return False
    if getattr(exc, "winerror", None) in _WINDOWS_LOCK_ERRORS:
        return True
    # Access denied is only a lock when Windows reports a sharing violation.
    if isinstance(exc, PermissionError):
        return False
    if isinstance(exc, BlockingIOError):
        return True
    return exc.errno in _LOCK_ERRNOS


def split_lines(text: str) -> list[str]:
    """Split on CRLF or LF and drop empty lines."""
    return [line for line in text.replace("\r\n", "\n").split("\n") if line]


class FileLoader:
    """Waits for an equipment log file to become readable and reads it."""

    def __init__(self, policy: RetryPolicy | None = None) -> None:
        self._policy = policy if policy is not None else RetryPolicy()

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def wait_until_ready(self, path: Path, policy: RetryPolicy | None = None) -> bool:
        """Try to open ``path`` for reading until it is no longer locked.

        Returns False when the file is still locked after ``max_attempts``.
        Non-lock I/O errors propagate.
        """
        policy = policy or self._policy
        for _ in range(policy.max_attempts):
            try:
                with path.open("rb"):
                    return True
            except OSError as exc:
                if not is_lock_error(exc):
                    raise
                policy.sleep(policy.delay_seconds)
        return False

    def read_all_text(
        self,
        path: Path,
        encoding: str,
        timeout_seconds: float | None = None,
    ) -> str:
        """Read the whole file, retrying lock errors every 250ms.

        Raises:
            FileReadTimeoutError: if the file stays locked past the timeout.
        """
        policy = self._policy.with_delay(READ_RETRY_DELAY_SECONDS)
        if timeout_seconds is not None:
            policy = policy.with_timeout(timeout_seconds)
        deadline = policy.start()
        while True:
            try:
                return path.read_text(encoding=encoding, errors="replace")
            except OSError as exc:
                if not is_lock_error(exc):
                    raise
                if deadline.expired():
                    raise FileReadTimeoutError(path, policy.timeout_seconds) from exc
                deadline.pause()

    def read_lines(
        self,
        path: Path,
        encoding: str,
        timeout_seconds: float | None = None,
    ) -> list[str]:
        return split_lines(self.read_all_text(path, encoding, timeout_seconds))
