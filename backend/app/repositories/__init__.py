"""Repository exports."""
from app.repositories.content_repository import ContentRepository
from app.repositories.job_store import JobStore

__all__ = [
    "ContentRepository",
    "JobStore",
]
