"""
Scan Job Service

Entry points of the posts maintenance scan engine: starting a resumable
job, polling it, the scheduled tick, the retention sweep, and the direct
synchronous scan used by the daily timer and the command-line tool.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from redis import Redis
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NoEligibleRecords
from app.models.job import JobBreakdown, ScanJob, utcnow
from app.models.progress import ProgressSnapshot, StartJobResult, SyncScanResult
from app.repositories.content_repository import ContentRepository
from app.repositories.job_store import JobStore
from app.services.batch_processor import BatchProcessor
from app.services.job_runner import JobRunner
from app.services.progress import ProgressReporter
from app.services.record_enumerator import RecordEnumerator, normalize_categories
from app.services.scheduler import SchedulerTrigger, TimerFacility
from app.services.sync_scan import AUX_TAXONOMY, ProgressCallback, SynchronousScanner

logger = logging.getLogger(__name__)


class ScanJobService:
    """
    Facade over the scan engine components.

    One instance is built per request or task; it holds no state of its
    own beyond its collaborators, and every operation reloads and persists
    the job explicitly.
    """

    def __init__(
        self,
        records: ContentRepository,
        store: JobStore,
        timer: TimerFacility,
        batch_size: int = 50,
        tick_delay: float = 1,
        retention_seconds: int = 3600,
        allowed_categories: Sequence[str] = ("post", "page"),
        default_categories: Sequence[str] = ("post", "page"),
    ):
        """
        Initialize the service.

        Args:
            records: Record store (content items)
            store: Durable job store
            timer: Timer facility for deferred ticks and cleanups
            batch_size: Items per batch
            tick_delay: Seconds before the next scheduled tick
            retention_seconds: Lifetime of terminal jobs after completion
            allowed_categories: Known content types
            default_categories: Used when the request has no valid type
        """
        self.records = records
        self.store = store
        self.allowed_categories = list(allowed_categories)
        self.default_categories = list(default_categories)

        self.enumerator = RecordEnumerator(records)
        self.processor = BatchProcessor(records, batch_size=batch_size)
        self.trigger = SchedulerTrigger(
            timer, tick_delay=tick_delay, retention_seconds=retention_seconds
        )
        self.runner = JobRunner(store, self.processor, self.trigger)
        self.reporter = ProgressReporter(store, self.runner)

    @classmethod
    def from_settings(cls, session: Session, client: Redis, timer: TimerFacility) -> "ScanJobService":
        """Build a service configured from application settings."""
        return cls(
            records=ContentRepository(session, eligible_status=settings.SCAN_ELIGIBLE_STATUS),
            store=JobStore(
                client,
                terminal_ttl=settings.SCAN_JOB_RETENTION_SECONDS + settings.SCAN_SCHEDULE_GRACE_SECONDS,
            ),
            timer=timer,
            batch_size=settings.SCAN_BATCH_SIZE,
            tick_delay=settings.SCAN_TICK_DELAY_SECONDS,
            retention_seconds=settings.SCAN_JOB_RETENTION_SECONDS,
            allowed_categories=settings.SCAN_PUBLIC_CONTENT_TYPES,
            default_categories=settings.SCAN_DEFAULT_CONTENT_TYPES,
        )

    def normalize(self, categories: Optional[Iterable[str]]) -> List[str]:
        return normalize_categories(categories, self.allowed_categories, self.default_categories)

    def start_job(
        self,
        categories: Optional[Iterable[str]] = None,
        require_records: bool = True,
        now: Optional[datetime] = None,
    ) -> StartJobResult:
        """
        Create a scan job and run its first batch synchronously.

        Args:
            categories: Requested content types (invalid ones are dropped)
            require_records: Raise instead of creating an empty job
            now: Clock override

        Returns:
            Job id, total item count and the effective categories

        Raises:
            NoEligibleRecords: Nothing is published for the categories and
                require_records is set
        """
        categories = self.normalize(categories)
        ids_by_category = self.enumerator.enumerate(categories)
        pending = [record_id for category in categories for record_id in ids_by_category[category]]
        total = len(pending)

        if total == 0 and require_records:
            raise NoEligibleRecords(categories)

        now = now or utcnow()
        job = ScanJob(
            categories=categories,
            pending=pending,
            total_count=total,
            breakdown=JobBreakdown(
                totals={category: len(ids_by_category[category]) for category in categories},
                processed={category: 0 for category in categories},
                extras={"categories": self.records.count_terms(AUX_TAXONOMY)},
            ),
            created_at=now,
            updated_at=now,
        )
        logger.info(f"Created scan job {job.id} for {categories} with {total} items")

        job = self.runner.step(job, now=now)
        return StartJobResult(job_id=job.id, total=total, categories=categories)

    def get_progress(self, job_id: str) -> ProgressSnapshot:
        """Progress of a job; a running job is advanced by one batch first."""
        return self.reporter.report(job_id)

    def tick(self, job_id: str, now: Optional[datetime] = None) -> Optional[ScanJob]:
        """
        Scheduled-trigger entry point.

        Returns:
            The job after this tick, or None if it no longer exists
        """
        self.trigger.acknowledge(job_id)

        job = self.store.get(job_id)
        if job is None:
            logger.info(f"Tick for unknown scan job {job_id}, ignoring")
            return None

        return self.runner.step(job, now=now)

    def cleanup_job(self, job_id: str) -> bool:
        """
        Retention sweep: delete a terminal job record.

        Returns:
            True if the record was deleted. Running jobs are kept.
        """
        job = self.store.get(job_id)
        if job is None:
            return False
        if not job.is_terminal:
            logger.warning(f"Refusing to clean up running scan job {job_id}")
            return False
        return self.store.delete(job_id)

    def run_synchronous_scan(
        self,
        categories: Optional[Iterable[str]] = None,
        chunk_size: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
        now: Optional[datetime] = None,
    ) -> SyncScanResult:
        """
        Scan the full eligible set in one call, bypassing the job store.

        Args:
            categories: Requested content types (invalid ones are dropped)
            chunk_size: Items per commit; the whole set when omitted
            on_progress: Optional ``(done, total)`` callback
            now: Clock override

        Returns:
            Processed/error/total counts with the per-type breakdown
        """
        scanner = SynchronousScanner(self.records, self.processor)
        return scanner.run(
            self.normalize(categories),
            chunk_size=chunk_size,
            on_progress=on_progress,
            now=now,
        )
