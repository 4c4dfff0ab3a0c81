"""
Posts Maintenance API Endpoints

This module provides endpoints to start and monitor content scans.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from redis import Redis
from sqlalchemy.orm import Session

from app.core.auth import require_admin
from app.core.celery_app import celery_app
from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import InvalidJobId, JobNotFound, NoEligibleRecords
from app.core.redis_client import get_redis
from app.models.progress import ProgressSnapshot, StartJobResult, SyncScanResult
from app.services.scan_jobs import ScanJobService
from app.services.scheduler import CeleryTimer, TimerFacility

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts-maintenance", tags=["posts-maintenance"])


class ScanRequest(BaseModel):
    """Request to scan content."""

    post_types: Optional[List[str]] = None
    """Content types to scan. Empty or all-invalid falls back to post and page."""


def get_timer(client: Redis = Depends(get_redis)) -> TimerFacility:
    """Timer facility backed by Celery countdown tasks."""
    return CeleryTimer(client, celery_app, grace_seconds=settings.SCAN_SCHEDULE_GRACE_SECONDS)


def get_scan_service(
    session: Session = Depends(get_db),
    client: Redis = Depends(get_redis),
    timer: TimerFacility = Depends(get_timer),
) -> ScanJobService:
    return ScanJobService.from_settings(session, client, timer)


@router.post("/scans", response_model=StartJobResult, status_code=status.HTTP_201_CREATED)
def start_scan(
    request: ScanRequest,
    user_id: str = Depends(require_admin),
    service: ScanJobService = Depends(get_scan_service),
) -> StartJobResult:
    """
    Start a background scan.

    The first batch runs before this returns; the rest is driven by
    scheduled ticks and by polling `/posts-maintenance/scans/{job_id}`.

    Args:
        request: Content types to scan
        user_id: Authenticated admin user ID (from JWT)

    Returns:
        Job ID, total item count and the effective content types
    """
    logger.info(f"Starting posts scan for user {user_id}: {request.post_types}")

    try:
        return service.start_job(request.post_types)
    except NoEligibleRecords:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail="No published content found for the selected types.",
        )


@router.get("/scans/{job_id}", response_model=ProgressSnapshot)
def get_scan_progress(
    job_id: str,
    user_id: str = Depends(require_admin),
    service: ScanJobService = Depends(get_scan_service),
) -> ProgressSnapshot:
    """
    Check the progress of a scan.

    Polling a running scan also processes its next batch.

    Args:
        job_id: Job ID returned from /scans
        user_id: Authenticated admin user ID (from JWT)

    Returns:
        Status, counts, percent and per-type breakdown
    """
    try:
        return service.get_progress(job_id)
    except InvalidJobId:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing job id",
        )
    except JobNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Scan job not found",
        )


@router.post("/scans/sync", response_model=SyncScanResult)
def run_sync_scan(
    request: ScanRequest,
    user_id: str = Depends(require_admin),
    service: ScanJobService = Depends(get_scan_service),
) -> SyncScanResult:
    """
    Scan all eligible content within this request.

    Only suitable for small sites; large selections should use `/scans`.
    """
    logger.info(f"Running synchronous posts scan for user {user_id}: {request.post_types}")
    return service.run_synchronous_scan(request.post_types)
