"""Services package for the posts maintenance scan engine."""

from app.services.batch_processor import BatchProcessor
from app.services.progress import ProgressReporter
from app.services.record_enumerator import RecordEnumerator
from app.services.scan_jobs import ScanJobService
from app.services.scheduler import CeleryTimer, SchedulerTrigger

__all__ = [
    "BatchProcessor",
    "CeleryTimer",
    "ProgressReporter",
    "RecordEnumerator",
    "ScanJobService",
    "SchedulerTrigger",
]
