"""Content item repository (the record store scanned by jobs)."""
from typing import List, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from app.db.models.content_item import ContentItem
from app.db.models.term import Term
from app.repositories.base_repository import BaseRepository


class ContentRepository(BaseRepository[ContentItem]):
    """Repository for ContentItem with scan-marker primitives."""

    def __init__(self, session: Session, eligible_status: str = "publish"):
        """Initialize content repository.

        Args:
            session: Database session
            eligible_status: Status that makes an item publicly visible
        """
        super().__init__(ContentItem, session)
        self.eligible_status = eligible_status

    def list_eligible_ids(self, content_type: str) -> List[int]:
        """List every eligible item ID of one content type, oldest first.

        No pagination is applied; the whole eligible set is returned.

        Args:
            content_type: Category label (post, page, ...)

        Returns:
            Item IDs ordered ascending
        """
        result = self.session.execute(
            select(ContentItem.id)
            .filter(
                ContentItem.content_type == content_type,
                ContentItem.status == self.eligible_status,
            )
            .order_by(ContentItem.id)
        )
        return list(result.scalars().all())

    def get_category(self, record_id: int) -> Optional[str]:
        """Current content type of an item, or None if it no longer exists."""
        result = self.session.execute(
            select(ContentItem.content_type).filter(ContentItem.id == record_id)
        )
        return result.scalar_one_or_none()

    def set_last_scanned(self, record_id: int, scanned_at: int) -> bool:
        """Write the scan marker of an item.

        Args:
            record_id: Item ID
            scanned_at: Unix timestamp to store

        Returns:
            True only if a stored value changed. False means either the value
            was already ``scanned_at`` or the write did not happen; callers
            tell the two apart with ``get_last_scanned``.
        """
        result = self.session.execute(
            update(ContentItem)
            .where(
                ContentItem.id == record_id,
                or_(
                    ContentItem.last_scanned_at.is_(None),
                    ContentItem.last_scanned_at != scanned_at,
                ),
            )
            .values(last_scanned_at=scanned_at)
            .execution_options(synchronize_session=False)
        )
        return (result.rowcount or 0) > 0

    def get_last_scanned(self, record_id: int) -> Optional[int]:
        """Stored scan marker of an item (None when never scanned or missing)."""
        result = self.session.execute(
            select(ContentItem.last_scanned_at).filter(ContentItem.id == record_id)
        )
        return result.scalar_one_or_none()

    def count_terms(self, taxonomy: str) -> int:
        """Count terms of a taxonomy, empty ones included."""
        result = self.session.execute(
            select(func.count(Term.id)).filter(Term.taxonomy == taxonomy)
        )
        return int(result.scalar_one())
