import logging
import sys
from datetime import datetime
from pathlib import Path
from types import TracebackType


class Log:
    """Process-wide stdout logging with structured format."""

    _logger: logging.Logger = logging.getLogger("eqp_ingest")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Configure the root ingest logger with the specified level and stdout handler."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        """Log an info message."""
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, exc_info: bool = False, **kwargs: object) -> None:
        """Log an error message, optionally with the active traceback."""
        cls._logger.error(message, exc_info=exc_info, extra=kwargs)


class _ExactLevelFilter(logging.Filter):
    def __init__(self, levels: set[int]) -> None:
        super().__init__()
        self._levels = levels

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno in self._levels


class IngestLogger:
    """Per-invocation logger handed to every pipeline component.

    Messages are prefixed with the plugin name. Each instance owns its
    logger, handlers and level; records propagate to the ``eqp_ingest``
    logger set up by ``Log``. Debug output is dropped unless debug mode is
    on. When ``log_dir`` is set, ``open()`` attaches daily
    ``<yyyymmdd>_event.log`` / ``_error.log`` / ``_debug.log`` files and
    ``close()`` detaches them again.
    """

    _FILE_FORMAT = "%(asctime)s.%(msecs)03d %(message)s"
    _DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

    def __init__(
        self,
        name: str,
        *,
        debug_enabled: bool = False,
        log_dir: Path | None = None,
    ) -> None:
        self.name = name
        self._debug_enabled = debug_enabled
        self._log_dir = log_dir
        # Unregistered logger owned by this instance; records still propagate
        # to the shared "eqp_ingest" logger configured by Log.
        self._logger = logging.Logger(f"eqp_ingest.{name}")
        self._logger.parent = Log._logger
        self._handlers: list[logging.Handler] = []
        self.set_debug_mode(debug_enabled)

    @property
    def debug_enabled(self) -> bool:
        return self._debug_enabled

    def set_debug_mode(self, enabled: bool) -> None:
        self._debug_enabled = enabled
        self._logger.setLevel(logging.DEBUG if enabled else logging.INFO)

    def open(self) -> "IngestLogger":
        if self._log_dir is None or self._handlers:
            return self
        self._log_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d")
        sinks = {
            "event": {logging.INFO, logging.WARNING},
            "error": {logging.ERROR, logging.CRITICAL},
            "debug": {logging.DEBUG},
        }
        formatter = logging.Formatter(self._FILE_FORMAT, self._DATE_FORMAT)
        for suffix, levels in sinks.items():
            handler = logging.FileHandler(
                self._log_dir / f"{stamp}_{suffix}.log", encoding="utf-8"
            )
            handler.setLevel(logging.DEBUG)
            handler.addFilter(_ExactLevelFilter(levels))
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)
            self._handlers.append(handler)
        return self

    def close(self) -> None:
        for handler in self._handlers:
            self._logger.removeHandler(handler)
            handler.close()
        self._handlers.clear()

    def __enter__(self) -> "IngestLogger":
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def event(self, message: str) -> None:
        """Log a normal processing event."""
        self._log(logging.INFO, message)

    def warning(self, message: str) -> None:
        self._log(logging.WARNING, message)

    def error(self, message: str, *, exc_info: bool = False) -> None:
        """Log an error; pass ``exc_info=True`` to attach the active traceback."""
        self._log(logging.ERROR, message, exc_info=exc_info)

    def debug(self, message: str) -> None:
        """Log a debug message. No-op unless debug mode is on."""
        if self._debug_enabled:
            self._log(logging.DEBUG, message)

    def _log(self, level: int, message: str, exc_info: bool = False) -> None:
        self._logger.log(
            level,
            f"[{self.name}] {message}",
            exc_info=exc_info,
            extra={"plugin": self.name},
        )
