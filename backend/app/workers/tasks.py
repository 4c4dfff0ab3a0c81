"""
Celery Tasks for Posts Maintenance Scans

This module contains the deferred tasks of the scan engine:
- advance_scan_job: one scheduled batch of a resumable job
- cleanup_scan_job: retention sweep for a finished job
- daily_posts_scan: recurring synchronous scan (Celery beat)
"""

import logging
from typing import Any, Dict, Optional

from celery import Task
from redis import Redis
from sqlalchemy.orm import Session

from app.core.celery_app import celery_app
from app.core.config import settings
from app.core.database import SessionLocal
from app.core.redis_client import get_redis
from app.services.scan_jobs import ScanJobService
from app.services.scheduler import CeleryTimer

logger = logging.getLogger(__name__)


class DatabaseTask(Task):
    """
    Base task that provides database session management.

    Each task gets a fresh database session that's automatically
    closed when the task completes (success or failure).
    """

    _session: Optional[Session] = None

    @property
    def session(self) -> Session:
        """Get or create a database session for this task."""
        if self._session is None:
            self._session = SessionLocal()
        return self._session

    def after_return(
        self, status: str, retval: Any, task_id: str, args: tuple, kwargs: dict, einfo: Any
    ) -> None:
        """Clean up database session after task completes."""
        if self._session is not None:
            self._session.close()
            self._session = None


def get_redis_client() -> Redis:
    return get_redis()


def build_timer(client: Redis) -> CeleryTimer:
    return CeleryTimer(client, celery_app, grace_seconds=settings.SCAN_SCHEDULE_GRACE_SECONDS)


def build_service(session: Session) -> ScanJobService:
    """Scan service wired to the worker's session, Redis and Celery."""
    client = get_redis_client()
    return ScanJobService.from_settings(session, client, build_timer(client))


@celery_app.task(bind=True, base=DatabaseTask, name="advance_scan_job")
def advance_scan_job(self: DatabaseTask, job_id: str) -> Dict[str, Any]:
    """
    Run one batch of a scan job.

    Duplicate or late firings are harmless: a finished or deleted job is
    left untouched.

    Args:
        job_id: Scan job ID

    Returns:
        Job status summary
    """
    service = build_service(self.session)
    job = service.tick(job_id)

    if job is None:
        return {"job_id": job_id, "status": "missing"}

    return {
        "job_id": job.id,
        "status": job.status.value,
        "processed": job.processed_count,
        "errors": job.error_count,
        "remaining": job.remaining,
    }


@celery_app.task(bind=True, base=DatabaseTask, name="cleanup_scan_job")
def cleanup_scan_job(self: DatabaseTask, job_id: str) -> Dict[str, Any]:
    """Delete a finished scan job once its retention window has passed."""
    service = build_service(self.session)
    deleted = service.cleanup_job(job_id)
    logger.info(f"Retention sweep for scan job {job_id}: {'deleted' if deleted else 'kept'}")
    return {"job_id": job_id, "deleted": deleted}


@celery_app.task(bind=True, base=DatabaseTask, name="daily_posts_scan")
def daily_posts_scan(self: DatabaseTask) -> Dict[str, Any]:
    """Scan the default content types synchronously."""
    logger.info("Starting daily posts scan")
    service = build_service(self.session)
    result = service.run_synchronous_scan(settings.SCAN_DEFAULT_CONTENT_TYPES)
    return result.model_dump(mode="json")
