class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class HeaderNotFoundError(ProcessorError):
    """Raised when a tabular file has no data header line."""


class FileReadTimeoutError(ProcessorError, TimeoutError):
    """Raised when a file stays unreadable for longer than the read timeout."""

    def __init__(self, path: object, timeout_seconds: float) -> None:
        super().__init__(f"Could not read file {path} within {timeout_seconds:g}s.")
        self.path = path
        self.timeout_seconds = timeout_seconds

