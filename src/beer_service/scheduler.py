"""Fixed-delay job scheduling with APScheduler."""

from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Optional

from apscheduler.events import EVENT_JOB_MAX_INSTANCES, JobSubmissionEvent
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
import structlog

logger = structlog.get_logger()


class FixedDelayScheduler:
    """Runs an async job after an initial delay, then again ``fixed_delay``
    seconds after each run has finished.

    The job is registered on an ``AsyncIOScheduler`` with an interval trigger
    and ``max_instances=1``: a fire time that arrives while the job is still
    running is skipped, not queued. When a run finishes the next run time is
    moved to ``end + fixed_delay``, so spacing is measured from the end of
    the previous run rather than from its start.
    """

    def __init__(
        self,
        name: str,
        job: Callable[[], Awaitable[Any]],
        initial_delay: float,
        fixed_delay: float,
    ):
        self.name = name
        self._job = job
        self.initial_delay = initial_delay
        self.fixed_delay = fixed_delay
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.runs = 0
        self.skipped = 0

    @property
    def running(self) -> bool:
        return self.scheduler is not None and self.scheduler.running

    async def _execute(self) -> None:
        try:
            await self._job()
        except Exception as e:
            logger.error("scheduled_job_failed", job=self.name, error=str(e), exc_info=True)
        finally:
            self.runs += 1
            if self.running:
                self.scheduler.modify_job(
                    self.name,
                    next_run_time=datetime.now(timezone.utc) + timedelta(seconds=self.fixed_delay),
                )

    def _on_max_instances(self, event: JobSubmissionEvent) -> None:
        if event.job_id == self.name:
            self.skipped += 1
            logger.info("scheduled_tick_skipped", job=self.name)

    def start(self) -> None:
        """Start the scheduler. Must be called from a running event loop."""
        if self.running:
            return

        self.scheduler = AsyncIOScheduler(timezone=timezone.utc)
        self.scheduler.add_listener(self._on_max_instances, EVENT_JOB_MAX_INSTANCES)
        self.scheduler.add_job(
            self._execute,
            trigger=IntervalTrigger(seconds=self.fixed_delay),
            id=self.name,
            name=self.name,
            next_run_time=datetime.now(timezone.utc) + timedelta(seconds=self.initial_delay),
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self.scheduler.start()

        job = self.scheduler.get_job(self.name)
        next_run = getattr(job, "next_run_time", None)
        logger.info(
            "scheduler_started",
            job=self.name,
            initial_delay_seconds=self.initial_delay,
            fixed_delay_seconds=self.fixed_delay,
            next_run=str(next_run) if next_run is not None else None,
        )

    async def stop(self) -> None:
        if not self.running:
            return
        self.scheduler.shutdown(wait=False)
        self.scheduler = None
        logger.info("scheduler_stopped", job=self.name)
