"""Periodic batch reconciliation on an APScheduler background thread."""

import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from recruit_match.logging import get_logger

logger = get_logger(__name__, component="scheduler")

JOB_ID = "batch-reconcile"


class ReconcileScheduler:
    """
    Runs a reconciliation callable every ``interval_seconds``.

    The first run starts immediately. A run still in progress when the next
    one is due is not doubled up: APScheduler allows a single instance and
    coalesces missed runs.
    """

    def __init__(
        self,
        reconcile_callable: Callable[[], object],
        interval_seconds: int,
        shutdown_event: Optional[threading.Event] = None,
    ):
        """
        Initialize the scheduler.

        Args:
            reconcile_callable: Called on every tick (e.g. service.run_batch_reconciliation)
            interval_seconds: Seconds between runs
            shutdown_event: Set on shutdown so the main thread can stop waiting
        """
        self.reconcile_callable = reconcile_callable
        self.interval_seconds = interval_seconds
        self.shutdown_event = shutdown_event
        self.scheduler = BackgroundScheduler(
            job_defaults={
                "max_instances": 1,
                "coalesce": True,
                "misfire_grace_time": interval_seconds,
            },
            timezone=timezone.utc,
        )

    def start(self) -> None:
        """Register the reconcile job and start the background thread."""
        first_run = datetime.now(timezone.utc)
        self.scheduler.add_job(
            func=self.reconcile_callable,
            trigger=IntervalTrigger(seconds=self.interval_seconds, timezone=timezone.utc),
            id=JOB_ID,
            name="Batch match reconciliation",
            replace_existing=True,
            next_run_time=first_run,
        )
        self.scheduler.start()

        logger.info(
            f"Scheduler started with interval: {self.interval_seconds} seconds",
            extra={
                "event": "scheduler.started",
                "interval_seconds": self.interval_seconds,
                "next_run_time": first_run.isoformat(),
            },
        )

    def shutdown(self, wait: bool = False) -> None:
        """
        Stop the scheduler and release anyone waiting on shutdown_event.

        Args:
            wait: Block until a running reconciliation finishes
        """
        logger.info(
            "Shutting down scheduler",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
        if self.shutdown_event is not None:
            self.shutdown_event.set()
        logger.info("Scheduler shutdown complete", extra={"event": "scheduler.stopped"})

    def is_running(self) -> bool:
        return self.scheduler.running

    def get_next_run_time(self) -> Optional[datetime]:
        job = self.scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None
