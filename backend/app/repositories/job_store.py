"""Durable job store backed by Redis.

Every operation is a plain read or write of one JSON document keyed by job
ID. There is no version check on ``put``: two writers that read the same
snapshot race and the later write wins.
"""
import logging
from typing import Optional

from redis import Redis

from app.models.job import ScanJob

logger = logging.getLogger(__name__)


class JobStore:
    """Get/put/delete scan job records by ID."""

    KEY_PREFIX = "scan_job:"

    def __init__(self, client: Redis, terminal_ttl: Optional[int] = None):
        """
        Initialize the store.

        Args:
            client: Redis client (decode_responses is not required)
            terminal_ttl: Expiry in seconds applied when a terminal job is
                written; None keeps terminal jobs until they are deleted
        """
        self.client = client
        self.terminal_ttl = terminal_ttl

    def _key(self, job_id: str) -> str:
        return f"{self.KEY_PREFIX}{job_id}"

    def get(self, job_id: str) -> Optional[ScanJob]:
        """Load a job, or None if absent."""
        raw = self.client.get(self._key(job_id))
        if raw is None:
            return None
        return ScanJob.model_validate_json(raw)

    def put(self, job: ScanJob) -> None:
        """Persist the full job record, replacing any previous version.

        Terminal jobs expire after ``terminal_ttl`` seconds so they are
        removed even when the retention sweep never runs.
        """
        ttl = self.terminal_ttl if job.is_terminal else None
        self.client.set(self._key(job.id), job.model_dump_json(), ex=ttl)

    def delete(self, job_id: str) -> bool:
        """Delete a job record. Returns True if one existed."""
        deleted = self.client.delete(self._key(job_id))
        if deleted:
            logger.info(f"Deleted scan job {job_id}")
        return bool(deleted)
