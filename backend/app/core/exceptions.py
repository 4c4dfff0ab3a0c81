"""Errors raised by the scan job engine."""
from typing import Sequence


class ScanError(Exception):
    """Base class for scan engine errors."""


class NoEligibleRecords(ScanError):
    """Raised when a scan is requested over categories with nothing published."""

    def __init__(self, categories: Sequence[str]):
        self.categories = list(categories)
        super().__init__(f"No published content found for types: {', '.join(self.categories)}")


class JobNotFound(ScanError):
    """Raised when a job id is unknown or its record has expired."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Scan job not found: {job_id}")


class InvalidJobId(ScanError):
    """Raised for an empty or blank job id."""
