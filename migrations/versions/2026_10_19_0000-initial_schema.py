"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create initial database schema:
    - short_urls table: Stores URL shortening mappings
    - access_logs table: One row per redirect, for analytics
    """
    op.create_table(
        'short_urls',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('iid', sa.Uuid(), nullable=False),
        sa.Column('original_url', sa.Text(), nullable=False),
        sa.Column('short_code', sa.String(length=64), nullable=False),
        sa.Column('short_url', sa.Text(), nullable=False),
        sa.Column('method', sa.String(length=16), nullable=False),
        sa.Column('expiration', sa.DateTime(timezone=True), nullable=True),
        sa.Column('redirect_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_accessed', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_modified', sa.DateTime(timezone=True), nullable=False),
        sa.Column('utm_source', sa.String(length=255), nullable=True),
        sa.Column('utm_medium', sa.String(length=255), nullable=True),
        sa.Column('utm_campaign', sa.String(length=255), nullable=True),
        sa.Column('utm_term', sa.String(length=255), nullable=True),
        sa.Column('utm_content', sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('iid'),
    )
    op.create_index('ix_short_urls_short_code', 'short_urls', ['short_code'], unique=True)
    op.create_index('ix_short_urls_short_url', 'short_urls', ['short_url'])
    op.create_index('ix_short_urls_original_url', 'short_urls', ['original_url'])
    op.create_index('ix_short_urls_created_at', 'short_urls', ['created_at'])

    op.create_table(
        'access_logs',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('iid', sa.Uuid(), nullable=False),
        sa.Column('short_url_id', sa.Integer(), nullable=False),
        sa.Column('accessed_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('iid'),
        sa.ForeignKeyConstraint(['short_url_id'], ['short_urls.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_access_logs_short_url_id', 'access_logs', ['short_url_id'])
    op.create_index('ix_access_logs_accessed_at', 'access_logs', ['accessed_at'])


def downgrade() -> None:
    op.drop_index('ix_access_logs_accessed_at', table_name='access_logs')
    op.drop_index('ix_access_logs_short_url_id', table_name='access_logs')
    op.drop_table('access_logs')

    op.drop_index('ix_short_urls_created_at', table_name='short_urls')
    op.drop_index('ix_short_urls_original_url', table_name='short_urls')
    op.drop_index('ix_short_urls_short_url', table_name='short_urls')
    op.drop_index('ix_short_urls_short_code', table_name='short_urls')
    op.drop_table('short_urls')
