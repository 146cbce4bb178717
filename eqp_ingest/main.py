import argparse
import sys

from eqp_ingest.config.settings import Settings
from eqp_ingest.database.connection import close_pool, init_pool
from eqp_ingest.logging.logger import Log
from eqp_ingest.processor.processor import IngestPlugin, LogFormat
from eqp_ingest.timesync.factory import TimeSyncFactory


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="eqp-ingest",
        description="Parse equipment log files and upload them to the database.",
    )
    parser.add_argument("format", choices=[f.value for f in LogFormat])
    parser.add_argument("paths", nargs="+", help="log files to ingest")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point: settings -> logging -> pool -> ingest each file."""
    args = parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        plugin = IngestPlugin(
            LogFormat(args.format), settings, TimeSyncFactory.create(settings)
        )
        if args.debug:
            plugin.set_debug_mode(True)
        failures = 0
        for path in args.paths:
            outcome = plugin.execute(path)
            if outcome.is_failure:
                Log.error(f"{path}: {outcome.value}")
                failures += 1
            else:
                Log.info(f"{path}: {outcome.value}")
    finally:
        close_pool()
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
