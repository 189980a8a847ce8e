"""Scheduled jobs for DexPaid Alert.

This module defines the monitoring job: one pass over the latest token
profiles, run once at startup and then on a fixed interval.

Usage:
    from dexpaid.scheduler.jobs import schedule_monitor_job

    schedule_monitor_job(scheduler, runner.run_pass, interval_seconds=5)
"""

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

import structlog
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.util import undefined

from dexpaid.core.monitor import DexPaidMonitor, PassResult

log = structlog.get_logger(__name__)

# Job ID constants
JOB_ID_MONITOR = "dex_paid_monitor"

MIN_INTERVAL_SECONDS = 0.5


async def run_monitor_pass(monitor: DexPaidMonitor) -> PassResult | None:
    """Run one monitoring pass.

    Note:
        Handles all errors internally to prevent job crashes.
        Returns None if the pass itself raised.
    """
    try:
        return await monitor.run_pass()
    except Exception as e:
        log.error("monitor_job_failed", error=str(e), error_type=type(e).__name__)
        return None


def schedule_monitor_job(
    scheduler: BaseScheduler,
    job: Callable[[], Awaitable[Any]],
    interval_seconds: float,
    run_immediately: bool = True,
) -> None:
    """Schedule or reschedule the monitoring job.

    At most one pass runs at a time: a run that comes due while the
    previous pass is still in flight is skipped (``max_instances=1``) and
    missed runs are collapsed into one (``coalesce=True``).

    Args:
        scheduler: Scheduler to register the job on.
        job: Coroutine function running one pass.
        interval_seconds: Seconds between runs.
        run_immediately: Also run once as soon as the scheduler starts.

    Raises:
        ValueError: If interval_seconds is below the minimum.
    """
    if interval_seconds < MIN_INTERVAL_SECONDS:
        raise ValueError(
            f"Invalid interval: {interval_seconds}. Must be at least {MIN_INTERVAL_SECONDS}s"
        )

    scheduler.add_job(
        job,
        trigger=IntervalTrigger(seconds=interval_seconds),
        id=JOB_ID_MONITOR,
        name="Dex Paid Monitor",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        next_run_time=datetime.now(UTC) if run_immediately else undefined,
    )

    log.info(
        "monitor_job_scheduled",
        job_id=JOB_ID_MONITOR,
        interval_seconds=interval_seconds,
        run_immediately=run_immediately,
    )


def unschedule_monitor_job(scheduler: BaseScheduler) -> None:
    """Remove the monitoring job from the scheduler.

    Safe to call when job is not scheduled.
    """
    if scheduler.get_job(JOB_ID_MONITOR):
        scheduler.remove_job(JOB_ID_MONITOR)
        log.info("monitor_job_unscheduled", job_id=JOB_ID_MONITOR)
