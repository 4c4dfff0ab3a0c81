"""Content item model (the records a scan touches)."""
from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, Index, Integer, String

from app.db.base import Base


class ContentItem(Base):
    """Publishable content item with its last-scan marker."""

    __tablename__ = "content_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False, default="")
    content_type = Column(String(50), nullable=False, default="post")  # post, page, or a custom type
    status = Column(String(20), nullable=False, default="draft")  # publish, draft, pending, private, trash
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Unix timestamp written by scans; NULL until the item is first scanned
    last_scanned_at = Column(BigInteger, nullable=True)

    __table_args__ = (
        Index("idx_content_items_type_status", "content_type", "status"),
    )
