"""Taxonomy term model."""
from sqlalchemy import Column, Integer, String, UniqueConstraint

from app.db.base import Base


class Term(Base):
    """Term in a taxonomy (category, post_tag, ...)."""

    __tablename__ = "terms"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    taxonomy = Column(String(50), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("taxonomy", "name", name="uq_terms_taxonomy_name"),
    )
