"""Main entry point with CLI."""
import argparse
import asyncio
import logging
import sys

from sellsy_backup.config import Config
from sellsy_backup.jobs.runner import BackupRunner
from sellsy_backup.jobs.scheduler import BackupScheduler
from sellsy_backup.logging_conf import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Sellsy backup")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--once",
        action="store_true",
        help="Run a single backup now, ignoring IS_SCHEDULED",
    )
    mode.add_argument(
        "--schedule",
        action="store_true",
        help="Run on the cron schedule, ignoring IS_SCHEDULED",
    )
    parser.add_argument(
        "--cron",
        default=None,
        help="Cron expression overriding SCHEDULE_PATTERN",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level overriding LOG_LEVEL",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level or "INFO")

    try:
        config = Config.from_env()

        # Override config from args
        if args.once:
            config.IS_SCHEDULED = False
        if args.schedule:
            config.IS_SCHEDULED = True
        if args.cron:
            config.SCHEDULE_PATTERN = args.cron
        if args.log_level:
            config.LOG_LEVEL = args.log_level

        config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    setup_logging(config.LOG_LEVEL)

    logger.info("=" * 60)
    logger.info("Sellsy Backup Starting")
    logger.info(f"Mode: {'SCHEDULED' if config.IS_SCHEDULED else 'ONCE'}")
    if config.IS_SCHEDULED:
        logger.info(f"Schedule: {config.SCHEDULE_PATTERN}")
    logger.info(f"Local path: {config.LOCAL_PATH}")
    logger.info(f"Retention: {config.MAXIMUM_HOLD_IN_DAYS} days")
    logger.info(f"Download concurrency: {config.DOWNLOAD_CONCURRENCY}")
    logger.info("=" * 60)

    scheduler = BackupScheduler(config, BackupRunner(config))
    try:
        asyncio.run(scheduler.start())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
