"""Tests for run-once and cron scheduling."""
import pytest
from apscheduler.triggers.cron import CronTrigger

from sellsy_backup.jobs.scheduler import JOB_ID, BackupScheduler


class StubRunner:
    """Stands in for BackupRunner and counts calls."""

    def __init__(self, error: Exception | None = None):
        self.calls = 0
        self.error = error

    async def run(self):
        self.calls += 1
        if self.error:
            raise self.error
        return None


@pytest.mark.asyncio
async def test_run_once_executes_immediately(config):
    """Without IS_SCHEDULED the backup runs once and start() returns."""
    runner = StubRunner()
    scheduler = BackupScheduler(config, runner)

    await scheduler.start()

    assert runner.calls == 1
    assert scheduler.scheduler is None


@pytest.mark.asyncio
async def test_run_once_propagates_failure(config):
    """A failed run-once backup propagates to the caller."""
    scheduler = BackupScheduler(config, StubRunner(error=RuntimeError("boom")))

    with pytest.raises(RuntimeError, match="boom"):
        await scheduler.start()


@pytest.mark.asyncio
async def test_scheduled_failure_does_not_raise(config):
    """In scheduled mode a failed backup is logged and swallowed."""
    config.IS_SCHEDULED = True
    runner = StubRunner(error=RuntimeError("boom"))
    scheduler = BackupScheduler(config, runner)

    await scheduler.execute_backup()

    assert runner.calls == 1


@pytest.mark.asyncio
async def test_schedule_registers_single_instance_cron_job(config):
    """The cron job never runs two instances at once."""
    config.IS_SCHEDULED = True
    config.SCHEDULE_PATTERN = "30 2 * * *"
    scheduler = BackupScheduler(config, StubRunner())

    job = scheduler.schedule().get_job(JOB_ID)

    assert isinstance(job.trigger, CronTrigger)
    assert job.max_instances == 1
    assert job.coalesce is True
    assert str(job.trigger.fields[CronTrigger.FIELD_NAMES.index("hour")]) == "2"
    assert str(job.trigger.fields[CronTrigger.FIELD_NAMES.index("minute")]) == "30"
