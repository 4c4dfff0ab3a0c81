"""Create content_items and terms tables

Revision ID: 001_content_tables
Revises:
Create Date: 2026-10-17 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_content_tables'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'content_items',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('content_type', sa.String(length=50), nullable=False, server_default='post'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='draft'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        # Unix timestamp of the last scan; NULL until first scanned
        sa.Column('last_scanned_at', sa.BigInteger(), nullable=True),
    )
    op.create_index('idx_content_items_type_status', 'content_items', ['content_type', 'status'])

    op.create_table(
        'terms',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('taxonomy', sa.String(length=50), nullable=False),
        sa.UniqueConstraint('taxonomy', 'name', name='uq_terms_taxonomy_name'),
    )
    op.create_index('ix_terms_taxonomy', 'terms', ['taxonomy'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_terms_taxonomy', table_name='terms')
    op.drop_table('terms')
    op.drop_index('idx_content_items_type_status', table_name='content_items')
    op.drop_table('content_items')
