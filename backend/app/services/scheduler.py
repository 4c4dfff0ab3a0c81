"""
Scheduler Trigger

Arranges deferred, one-shot invocations of the batch processor (and of the
retention sweep) through a timer facility. Scheduling is best effort: a
timer that never fires only means the job waits for the next progress poll,
so failures here are logged and swallowed.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Protocol

from celery import Celery
from redis import Redis

from app.models.job import ScanJob, utcnow

logger = logging.getLogger(__name__)

TICK_TASK = "advance_scan_job"
CLEANUP_TASK = "cleanup_scan_job"


class TimerFacility(Protocol):
    """Durable one-shot timers with duplicate suppression by key."""

    def schedule_once(self, delay: float, key: str, payload: Dict[str, Any]) -> bool:
        """Schedule ``payload`` after ``delay`` seconds unless ``key`` is pending."""
        ...

    def is_scheduled(self, key: str) -> bool:
        """Whether a timer for ``key`` is pending."""
        ...

    def release(self, key: str) -> None:
        """Forget the pending marker for ``key`` (called when the timer fires)."""
        ...


class CeleryTimer:
    """
    Timer facility on top of Celery countdown tasks.

    A Redis marker per key records that a timer is pending. It expires
    ``grace_seconds`` after the due time, so a timer the worker never picked
    up stops blocking new ones.
    """

    MARKER_PREFIX = "scan_timer:"

    def __init__(self, client: Redis, app: Celery, grace_seconds: int = 60):
        self.client = client
        self.app = app
        self.grace_seconds = grace_seconds

    def _marker(self, key: str) -> str:
        return f"{self.MARKER_PREFIX}{key}"

    def schedule_once(self, delay: float, key: str, payload: Dict[str, Any]) -> bool:
        ttl = max(1, int(delay) + self.grace_seconds)
        if not self.client.set(self._marker(key), "1", nx=True, ex=ttl):
            return False

        try:
            self.app.send_task(
                payload["task"],
                kwargs=payload.get("kwargs", {}),
                countdown=delay,
            )
        except Exception:
            self.client.delete(self._marker(key))
            raise
        return True

    def is_scheduled(self, key: str) -> bool:
        return bool(self.client.exists(self._marker(key)))

    def release(self, key: str) -> None:
        self.client.delete(self._marker(key))


class SchedulerTrigger:
    """Keeps at most one pending tick per running job."""

    def __init__(
        self,
        timer: TimerFacility,
        tick_delay: float = 1,
        retention_seconds: int = 3600,
    ):
        """
        Initialize the trigger.

        Args:
            timer: Timer facility used for deferred invocations
            tick_delay: Seconds between a batch and the next scheduled one
            retention_seconds: How long terminal jobs are kept after completion
        """
        self.timer = timer
        self.tick_delay = tick_delay
        self.retention_seconds = retention_seconds

    @staticmethod
    def tick_key(job_id: str) -> str:
        return f"scan_job_tick:{job_id}"

    @staticmethod
    def cleanup_key(job_id: str) -> str:
        return f"scan_job_cleanup:{job_id}"

    def arm(self, job: ScanJob) -> bool:
        """
        Schedule the next tick for a running job.

        Returns:
            True if a new timer was scheduled; False if the job is terminal,
            a tick is already pending, or scheduling failed
        """
        if job.is_terminal:
            return False

        key = self.tick_key(job.id)
        try:
            if self.timer.is_scheduled(key):
                logger.debug(f"Tick already pending for scan job {job.id}")
                return False
            return self.timer.schedule_once(
                self.tick_delay,
                key,
                {"task": TICK_TASK, "kwargs": {"job_id": job.id}},
            )
        except Exception as e:
            logger.warning(f"Could not schedule next tick for scan job {job.id}: {e}")
            return False

    def acknowledge(self, job_id: str) -> None:
        """Clear the pending-tick marker once the tick has fired."""
        try:
            self.timer.release(self.tick_key(job_id))
        except Exception as e:
            logger.warning(f"Could not release tick marker for scan job {job_id}: {e}")

    def schedule_cleanup(self, job: ScanJob, now: Optional[datetime] = None) -> bool:
        """
        Schedule deletion of a terminal job after the retention window.

        Returns:
            True if the cleanup timer was scheduled
        """
        if not job.is_terminal:
            return False

        now = now or utcnow()
        completed_at = job.completed_at or now
        elapsed = (now - completed_at).total_seconds()
        delay = max(0.0, self.retention_seconds - elapsed)

        try:
            return self.timer.schedule_once(
                delay,
                self.cleanup_key(job.id),
                {"task": CLEANUP_TASK, "kwargs": {"job_id": job.id}},
            )
        except Exception as e:
            logger.warning(f"Could not schedule cleanup for scan job {job.id}: {e}")
            return False
