"""
Backup Scheduler - Cron and On-Demand Execution

Runs the backup once at start, or on a cron schedule using APScheduler.
A trigger that fires while a backup is still running is skipped.
"""

import asyncio
import logging
import signal

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from sellsy_backup.config import Config
from sellsy_backup.jobs.runner import BackupRunner

logger = logging.getLogger(__name__)

JOB_ID = "sellsy_backup"


class BackupScheduler:
    """
    Scheduler for periodic or on-demand backups.

    Handles:
    - APScheduler setup and management
    - Cron-based scheduling
    - Run-once immediate execution
    - Signal handling for graceful shutdown
    """

    def __init__(self, config: Config, runner: BackupRunner) -> None:
        self.config = config
        self.runner = runner
        self.run_once = not config.IS_SCHEDULED
        self.scheduler: AsyncIOScheduler | None = None
        self.shutdown_event = asyncio.Event()

        logger.info(
            f"BackupScheduler initialized (run_once={self.run_once}, "
            f"cron_schedule={config.SCHEDULE_PATTERN!r})"
        )

    async def execute_backup(self) -> None:
        """Run one backup.

        In run-once mode a failure propagates to the caller. In scheduled mode
        it is logged and the scheduler keeps going.
        """
        logger.info("Starting backup execution")

        try:
            report = await self.runner.run()
        except Exception as e:
            logger.error(f"Backup execution failed: {e}", exc_info=True)
            if self.run_once:
                raise
            return

        if report is not None:
            logger.info(f"Backup execution completed successfully (archive={report.archive})")

    def setup_signal_handlers(self) -> None:
        """Setup handlers for graceful shutdown on SIGINT/SIGTERM."""

        def signal_handler(signum: int, frame: object) -> None:
            logger.info(f"Received signal {signum}, initiating graceful shutdown")
            self.shutdown_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def schedule(self) -> AsyncIOScheduler:
        """Create the scheduler and register the cron job (not started)."""
        self.scheduler = AsyncIOScheduler()
        trigger = CronTrigger.from_crontab(self.config.SCHEDULE_PATTERN)
        self.scheduler.add_job(
            self.execute_backup,
            trigger=trigger,
            id=JOB_ID,
            name="Periodic Sellsy backup",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        return self.scheduler

    async def start(self) -> None:
        """
        Start scheduler or execute once.

        In scheduled mode, runs continuously until shutdown signal.
        In run-once mode, executes immediately and returns.
        """
        if self.run_once:
            logger.info("Running in run-once mode")
            await self.execute_backup()
            return

        self.setup_signal_handlers()
        logger.info("Running in scheduled mode")

        scheduler = self.schedule()
        scheduler.start()
        logger.info("Scheduler started")

        job = scheduler.get_job(JOB_ID)
        next_run = getattr(job, "next_run_time", None)
        logger.info(f"Scheduled backup job (schedule={self.config.SCHEDULE_PATTERN!r}, next_run={next_run})")
        logger.info("Waiting for jobs...")

        await self.shutdown_event.wait()

        logger.info("Shutting down scheduler")
        scheduler.shutdown(wait=True)
        logger.info("Scheduler shutdown complete")
