"""Result shapes returned to the transport layer."""
from typing import List

from pydantic import BaseModel, Field

from app.models.job import JobBreakdown, JobStatus


class StartJobResult(BaseModel):
    """Returned when a scan job is created."""

    job_id: str
    total: int
    categories: List[str]


class ProgressSnapshot(BaseModel):
    """Point-in-time view of a scan job."""

    job_id: str
    status: JobStatus
    processed: int
    errors: int
    total: int
    percent: int
    breakdown: JobBreakdown


class SyncScanResult(BaseModel):
    """Outcome of a one-call, non-resumable scan."""

    processed: int
    errors: int
    total: int
    categories: List[str]
    breakdown: JobBreakdown = Field(default_factory=JobBreakdown)
