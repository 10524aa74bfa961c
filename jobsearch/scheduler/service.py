"""Debounced rebuild scheduling on top of APScheduler."""

import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional
from uuid import uuid4

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

from jobsearch.logging import get_logger

logger = get_logger(__name__, component="scheduler")


class RebuildScheduler:
    """
    Runs the most recent rebuild request once input has been quiet long enough.

    Every ``schedule`` call registers a one-off DateTrigger job ``debounce_seconds``
    in the future and removes the previously pending job if it has not started
    yet. Jobs that already started keep running on the worker pool; the caller
    is responsible for discarding their output when it is stale.
    """

    def __init__(
        self,
        debounce_seconds: float = 0.2,
        max_workers: int = 4,
    ):
        """
        Initialize the rebuild scheduler.

        Args:
            debounce_seconds: Quiet period before a scheduled rebuild runs
            max_workers: Worker threads available to rebuilds; more than one lets
                a fresh rebuild run while a superseded one is still finishing
        """
        self.debounce_seconds = debounce_seconds
        self._lock = threading.Lock()
        self._pending_job_id: Optional[str] = None

        self.scheduler = BackgroundScheduler(
            executors={"default": ThreadPoolExecutor(max_workers=max_workers)},
            job_defaults={
                "max_instances": 1,  # Each job id runs once; ids are never reused
                "coalesce": True,
                "misfire_grace_time": None,  # A late rebuild still beats no rebuild
            },
            timezone=timezone.utc,
        )

    def start(self) -> None:
        """Start the background scheduler if it is not running yet."""
        if self.scheduler.running:
            return

        self.scheduler.start()
        logger.info(
            f"Rebuild scheduler started with debounce: {self.debounce_seconds} seconds",
            extra={
                "event": "scheduler.started",
                "debounce_seconds": self.debounce_seconds,
            },
        )

    def schedule(self, func: Callable[..., Any], *args: Any) -> str:
        """
        Schedule ``func(*args)`` after the debounce window, superseding any pending call.

        Args:
            func: Callable to run on a worker thread
            *args: Positional arguments for ``func``

        Returns:
            Id of the scheduled job
        """
        self.start()

        run_date = datetime.now(timezone.utc) + timedelta(seconds=self.debounce_seconds)
        job_id = f"rebuild-{uuid4().hex}"

        with self._lock:
            superseded = self._remove_pending_locked()
            self.scheduler.add_job(
                func=func,
                trigger=DateTrigger(run_date=run_date, timezone=timezone.utc),
                args=args,
                id=job_id,
                name="Search rebuild",
            )
            self._pending_job_id = job_id

        logger.debug(
            "Rebuild scheduled",
            extra={
                "event": "scheduler.rebuild.scheduled",
                "job_id": job_id,
                "superseded_pending": superseded,
                "run_date": run_date.isoformat(),
            },
        )
        return job_id

    def cancel_pending(self) -> bool:
        """
        Drop the pending rebuild, if it has not started.

        Returns:
            True if a pending job was removed
        """
        with self._lock:
            return self._remove_pending_locked()

    def _remove_pending_locked(self) -> bool:
        job_id = self._pending_job_id
        self._pending_job_id = None
        if job_id is None:
            return False
        try:
            self.scheduler.remove_job(job_id)
            return True
        except JobLookupError:
            # Already handed to the executor
            return False

    @property
    def pending_job_id(self) -> Optional[str]:
        """Id of the most recently scheduled job (may already be running)."""
        return self._pending_job_id

    def shutdown(self, wait: bool = False) -> None:
        """
        Shut down the scheduler.

        Args:
            wait: If True, wait for running rebuilds to complete before returning
        """
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
            logger.info(
                "Rebuild scheduler shut down",
                extra={"event": "scheduler.stopped", "wait_for_jobs": wait},
            )

    def is_running(self) -> bool:
        """Check if the scheduler is currently running."""
        return self.scheduler.running
