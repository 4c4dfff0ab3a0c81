"""Domain models."""
from app.models.job import JobBreakdown, JobStatus, ScanJob
from app.models.progress import ProgressSnapshot, StartJobResult, SyncScanResult

__all__ = [
    "JobBreakdown",
    "JobStatus",
    "ScanJob",
    "ProgressSnapshot",
    "StartJobResult",
    "SyncScanResult",
]
