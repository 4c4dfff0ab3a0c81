"""Database models package."""
from app.db.models.content_item import ContentItem
from app.db.models.term import Term

__all__ = [
    "ContentItem",
    "Term",
]
