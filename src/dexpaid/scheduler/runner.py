"""Interval runner driving the Dex paid monitor.

MonitorRunner owns an AsyncIOScheduler and the monitoring job registered
on it. It keeps the outcome of the latest pass and, on stop, waits for a
pass that is still in flight so the HTTP clients are not closed under it.

Usage:
    runner = MonitorRunner(monitor, interval_seconds=5)
    runner.start()
    ...
    await runner.stop()
"""

import asyncio

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from dexpaid.core.monitor import DexPaidMonitor, PassResult
from dexpaid.scheduler.jobs import (
    MIN_INTERVAL_SECONDS,
    run_monitor_pass,
    schedule_monitor_job,
    unschedule_monitor_job,
)

log = structlog.get_logger(__name__)

# Consecutive aborted passes before the listing outage is logged as an error
ABORT_ALERT_THRESHOLD = 3
DEFAULT_STOP_TIMEOUT = 15.0


class MonitorRunner:
    """Runs monitoring passes on a fixed interval.

    Attributes:
        monitor: Monitor whose pass is run.
        interval_seconds: Seconds between passes.
        passes: Number of passes finished since start.
        last_result: Result of the latest pass, None before the first one
            or when the latest pass raised.
        consecutive_aborts: Aborted passes in a row, reset by a completed pass.
    """

    def __init__(
        self,
        monitor: DexPaidMonitor,
        interval_seconds: float,
        run_immediately: bool = True,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        """Initialize runner.

        Args:
            monitor: Monitor whose pass is run.
            interval_seconds: Seconds between passes.
            run_immediately: Run the first pass as soon as the runner starts.
            scheduler: Scheduler to register on (defaults to a new UTC one).

        Raises:
            ValueError: If interval_seconds is below the minimum.
        """
        if interval_seconds < MIN_INTERVAL_SECONDS:
            raise ValueError(
                f"Invalid interval: {interval_seconds}. Must be at least {MIN_INTERVAL_SECONDS}s"
            )
        self.monitor = monitor
        self.interval_seconds = interval_seconds
        self.run_immediately = run_immediately
        self.passes = 0
        self.last_result: PassResult | None = None
        self.consecutive_aborts = 0
        self._scheduler = scheduler or AsyncIOScheduler(timezone="UTC")
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def running(self) -> bool:
        return self._scheduler.running

    @property
    def pass_in_flight(self) -> bool:
        return not self._idle.is_set()

    def start(self) -> None:
        """Register the monitoring job and start the scheduler.

        Must be called from inside the running event loop. Safe to call
        when already started.
        """
        if self._scheduler.running:
            return
        schedule_monitor_job(
            self._scheduler,
            self.run_pass,
            interval_seconds=self.interval_seconds,
            run_immediately=self.run_immediately,
        )
        self._scheduler.start()
        log.info(
            "monitor_runner_started",
            interval_seconds=self.interval_seconds,
            run_immediately=self.run_immediately,
        )

    async def stop(self, timeout: float = DEFAULT_STOP_TIMEOUT) -> None:
        """Stop scheduling passes and wait for the one in flight, if any.

        Args:
            timeout: Seconds to wait for an in-flight pass before giving up.
        """
        if self._scheduler.running:
            unschedule_monitor_job(self._scheduler)
            self._scheduler.shutdown(wait=False)

        if self.pass_in_flight:
            log.info("monitor_runner_waiting_for_pass", timeout=timeout)
            try:
                await asyncio.wait_for(self._idle.wait(), timeout)
            except TimeoutError:
                log.warning("monitor_runner_stop_timeout", timeout=timeout)

        log.info("monitor_runner_stopped", passes=self.passes)

    async def run_pass(self) -> PassResult | None:
        """Run one pass and update the runner's bookkeeping.

        This is the callable registered on the scheduler.
        """
        self._idle.clear()
        try:
            result = await run_monitor_pass(self.monitor)
        finally:
            self._idle.set()

        self.passes += 1
        self.last_result = result

        if result is not None and result.status == "completed":
            if self.consecutive_aborts:
                log.info("monitor_listing_recovered", aborted_passes=self.consecutive_aborts)
            self.consecutive_aborts = 0
        else:
            self.consecutive_aborts += 1
            if self.consecutive_aborts == ABORT_ALERT_THRESHOLD:
                log.error(
                    "monitor_listing_unavailable",
                    aborted_passes=self.consecutive_aborts,
                )
        return result
