"""Scan job record persisted in the durable job store."""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"  # reserved, no operation enters it
    CANCELED = "canceled"  # reserved, no operation enters it

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.RUNNING


class JobBreakdown(BaseModel):
    """Per-category counters shown next to the progress bar."""
    totals: Dict[str, int] = Field(default_factory=dict)
    processed: Dict[str, int] = Field(default_factory=dict)
    extras: Dict[str, int] = Field(default_factory=dict)


class ScanJob(BaseModel):
    """Tracks the lifecycle of a resumable content scan."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    categories: List[str]
    pending: List[int] = Field(default_factory=list)
    processed_count: int = 0
    error_count: int = 0
    total_count: int = 0
    status: JobStatus = JobStatus.RUNNING
    breakdown: JobBreakdown = Field(default_factory=JobBreakdown)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def remaining(self) -> int:
        return len(self.pending)
