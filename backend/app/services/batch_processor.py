"""
Batch Processor

Advances a scan job by exactly one bounded batch. Each call removes up to
``batch_size`` IDs from the front of the job's pending queue, stamps every
item with the scan timestamp and tallies the outcome. It never loops to
drain the queue; follow-up calls come from the scheduler trigger or from
progress polling.
"""

import logging
from datetime import datetime
from typing import Optional

from app.models.job import JobStatus, ScanJob, utcnow
from app.repositories.content_repository import ContentRepository

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50


class BatchProcessor:
    """State machine step for scan jobs."""

    def __init__(self, records: ContentRepository, batch_size: int = DEFAULT_BATCH_SIZE):
        """
        Initialize the processor.

        Args:
            records: Record store used for scan marker reads and writes
            batch_size: Maximum number of items handled per ``advance`` call
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.records = records
        self.batch_size = batch_size

    def scan_record(self, record_id: int, scanned_at: int) -> bool:
        """
        Stamp one item and decide whether it counts as processed.

        The write primitive reports "nothing changed" both when the stored
        value already equals ``scanned_at`` and when the write failed, so a
        no-op is re-read: an equal stored value is a success (a prior attempt
        already wrote it), anything else is an error.

        Args:
            record_id: Item ID
            scanned_at: Unix timestamp to store

        Returns:
            True if processed, False if the item counts as an error
        """
        if self.records.set_last_scanned(record_id, scanned_at):
            return True

        current = self.records.get_last_scanned(record_id)
        if current is not None and int(current) == scanned_at:
            return True

        logger.warning(f"Scan marker not written for item {record_id} (stored: {current})")
        return False

    def advance(self, job: ScanJob, now: Optional[datetime] = None) -> ScanJob:
        """
        Process at most one batch of a job.

        Args:
            job: Job to advance (not mutated)
            now: Clock override for the scan timestamp and job timestamps

        Returns:
            Updated copy of the job. Terminal jobs are returned unchanged.
        """
        if job.is_terminal:
            return job

        now = now or utcnow()
        job = job.model_copy(deep=True)

        if not job.pending:
            self._complete(job, now)
            return job

        batch = job.pending[: self.batch_size]
        job.pending = job.pending[self.batch_size :]
        scanned_at = int(now.timestamp())

        processed = 0
        errors = 0
        for record_id in batch:
            if not self.scan_record(record_id, scanned_at):
                errors += 1
                continue

            processed += 1
            # Attributed to the item's current type, not the list it was enumerated from
            category = self.records.get_category(record_id)
            if category in job.breakdown.processed:
                job.breakdown.processed[category] += 1

        self.records.commit()

        job.processed_count += processed
        job.error_count += errors
        job.updated_at = now

        logger.info(
            f"Scan job {job.id}: batch of {len(batch)} -> {processed} processed, "
            f"{errors} errors, {job.remaining} remaining"
        )

        if not job.pending:
            self._complete(job, now)

        return job

    def _complete(self, job: ScanJob, now: datetime) -> None:
        job.status = JobStatus.COMPLETED
        job.completed_at = now
        job.updated_at = now
        logger.info(
            f"Scan job {job.id} completed: {job.processed_count}/{job.total_count} processed, "
            f"{job.error_count} errors"
        )
