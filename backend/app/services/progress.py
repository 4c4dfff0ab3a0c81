"""
Progress Reporter

Builds progress snapshots for pollers. Polling a running job also advances
it by one batch, so a client that keeps polling always drives the job to
completion even when no scheduled tick ever fires.
"""

import logging

from app.core.exceptions import InvalidJobId, JobNotFound
from app.models.job import ScanJob
from app.models.progress import ProgressSnapshot
from app.repositories.job_store import JobStore
from app.services.job_runner import JobRunner

logger = logging.getLogger(__name__)


def compute_percent(processed: int, total: int) -> int:
    """floor(processed / total * 100); an empty selection counts as 100."""
    if total <= 0:
        return 100
    return min(100, (processed * 100) // total)


class ProgressReporter:
    """Read side of scan jobs, with self-healing advance on poll."""

    def __init__(self, store: JobStore, runner: JobRunner):
        self.store = store
        self.runner = runner

    @staticmethod
    def snapshot(job: ScanJob) -> ProgressSnapshot:
        """Structured view of a job; does not touch storage."""
        return ProgressSnapshot(
            job_id=job.id,
            status=job.status,
            processed=job.processed_count,
            errors=job.error_count,
            total=job.total_count,
            percent=compute_percent(job.processed_count, job.total_count),
            breakdown=job.breakdown.model_copy(deep=True),
        )

    def report(self, job_id: str) -> ProgressSnapshot:
        """
        Report progress, advancing a running job by one batch first.

        Args:
            job_id: Job identifier

        Returns:
            Snapshot taken after the advance

        Raises:
            InvalidJobId: job_id is empty
            JobNotFound: no job with this id exists
        """
        if not job_id or not job_id.strip():
            raise InvalidJobId("Missing job id")

        job = self.store.get(job_id)
        if job is None:
            raise JobNotFound(job_id)

        job = self.runner.step(job)
        return self.snapshot(job)
