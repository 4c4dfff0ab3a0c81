"""One read-modify-write step of a scan job."""
import logging
from datetime import datetime
from typing import Optional

from app.models.job import ScanJob
from app.repositories.job_store import JobStore
from app.services.batch_processor import BatchProcessor
from app.services.scheduler import SchedulerTrigger

logger = logging.getLogger(__name__)


class JobRunner:
    """Advances a job by one batch, persists it and re-arms its timers."""

    def __init__(self, store: JobStore, processor: BatchProcessor, trigger: SchedulerTrigger):
        self.store = store
        self.processor = processor
        self.trigger = trigger

    def step(self, job: ScanJob, now: Optional[datetime] = None) -> ScanJob:
        """
        Run one batch for a running job and persist the result.

        Terminal jobs are returned as-is without touching the store. A job
        that completes in this step gets its retention cleanup scheduled; a
        job that is still running gets its next tick armed.

        Args:
            job: Job loaded from the store
            now: Clock override

        Returns:
            The persisted job
        """
        if job.is_terminal:
            return job

        job = self.processor.advance(job, now=now)
        self.store.put(job)

        if job.is_terminal:
            self.trigger.schedule_cleanup(job, now=now)
        else:
            self.trigger.arm(job)
        return job
