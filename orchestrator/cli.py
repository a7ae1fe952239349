"""
Orchestrator - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line entry point for the war synchronizer.

- Provides argparse-based CLI
- Loads configuration from .env, environment and arguments
- Wires the API client, storage, sync service and scheduler
- Stops gracefully on SIGINT / SIGTERM

============================================================
USAGE
============================================================
war-sync
war-sync --interval 30 --languages en-US,de-DE
war-sync --once --log-level DEBUG
python -m orchestrator.cli --database-url sqlite:///war.db

============================================================
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .core import SyncScheduler, setup_logging
from .models import LOG_FORMATS, SyncConfig, parse_languages
from core.exceptions import ConfigurationError, StorageError
from data_ingestion.collectors.arrowhead import ArrowHeadApiClient
from data_ingestion.sync_service import WarSyncService
from storage.snapshot_store import SqlSnapshotStore


EXIT_OK = 0
EXIT_CYCLE_FAILED = 1
EXIT_BAD_CONFIG = 2


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="war-sync",
        description="Periodically mirror the ArrowHead war API into a database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Every option can also be set through the environment (or a .env file):
  SYNC_INTERVAL_SECONDS, SYNC_LANGUAGES, SYNC_RETRY_STEP_SECONDS,
  SYNC_MAX_CONCURRENT_FETCHES, ARROWHEAD_API_URL, ARROWHEAD_TIMEOUT_SECONDS,
  DATABASE_URL, LOG_LEVEL, LOG_FORMAT, SYNC_HISTORY_SIZE

Examples:
  %(prog)s                                  # Run until interrupted
  %(prog)s --once                           # Run a single cycle and exit
  %(prog)s --languages en-US,fr-FR --interval 60
        """
    )

    # --------------------------------------------------------
    # Scheduling
    # --------------------------------------------------------
    parser.add_argument(
        "--interval",
        type=float,
        metavar="SECONDS",
        help="Delay between successful cycles (default: 20)",
    )

    parser.add_argument(
        "--languages",
        type=str,
        metavar="LIST",
        help="Comma separated language identifiers ('' for none)",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single cycle and exit (no loop)",
    )

    # --------------------------------------------------------
    # Endpoints
    # --------------------------------------------------------
    parser.add_argument(
        "--api-url",
        type=str,
        metavar="URL",
        help="ArrowHead API root",
    )

    parser.add_argument(
        "--database-url",
        type=str,
        metavar="URL",
        help="SQLAlchemy database URL (default: sqlite:///war_sync.db)",
    )

    # --------------------------------------------------------
    # Logging
    # --------------------------------------------------------
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--log-format",
        type=str,
        choices=list(LOG_FORMATS),
        help="Log output format (default: text)",
    )

    return parser


def build_config(args: argparse.Namespace) -> SyncConfig:
    """
    Build configuration from environment, overridden by arguments.

    Raises:
        ConfigurationError: If the result is invalid
    """
    config = SyncConfig.from_env()

    if args.interval is not None:
        config.interval_seconds = args.interval
    if args.languages is not None:
        config.languages = parse_languages(args.languages)
    if args.api_url:
        config.api_base_url = args.api_url
    if args.database_url:
        config.database_url = args.database_url
    if args.log_level:
        config.log_level = args.log_level
    if args.log_format:
        config.log_format = args.log_format

    return config.ensure_valid()


# ============================================================
# RUNTIME
# ============================================================

def install_signal_handlers(scheduler: SyncScheduler) -> None:
    """Route SIGINT / SIGTERM to scheduler.stop()."""
    loop = asyncio.get_running_loop()

    if sys.platform == "win32":
        # No add_signal_handler on the Windows event loop
        signal.signal(
            signal.SIGINT,
            lambda signum, frame: loop.call_soon_threadsafe(scheduler.stop),
        )
        return

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, scheduler.stop)


async def run(config: SyncConfig, once: bool = False) -> int:
    """
    Wire collaborators and run the scheduler.

    Returns:
        Process exit code
    """
    logger = logging.getLogger("sync.cli")

    store = SqlSnapshotStore.from_url(config.database_url)

    try:
        try:
            store.verify_connection()
            store.create_schema()
        except StorageError as e:
            logger.error(f"Storage unavailable: {e}")
            return EXIT_CYCLE_FAILED

        async with ArrowHeadApiClient(
            base_url=config.api_base_url,
            timeout_seconds=config.request_timeout_seconds,
        ) as api:
            service = WarSyncService(
                api,
                store,
                languages=config.languages,
                max_concurrent_fetches=config.max_concurrent_fetches,
            )
            scheduler = SyncScheduler.from_config(service, config)
            install_signal_handlers(scheduler)

            logger.info(
                f"Starting war sync | languages={','.join(service.languages) or '-'} | "
                f"api={config.api_base_url}"
            )

            if once:
                result = await scheduler.run_once()
                if result is None or not result.success:
                    return EXIT_CYCLE_FAILED
                return EXIT_OK

            await scheduler.run()
            return EXIT_OK
    finally:
        store.dispose()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    load_dotenv()

    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_BAD_CONFIG

    setup_logging(level=config.log_level, log_format=config.log_format)

    return asyncio.run(run(config, once=args.once))


if __name__ == "__main__":
    sys.exit(main())
