"""add event invite links

Revision ID: 7c2d9e4f1b36
Revises: 4b1c2e7d9a10
Create Date: 2026-10-17 14:05:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7c2d9e4f1b36'
down_revision: Union[str, None] = '4b1c2e7d9a10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('event_invite_links',
    sa.Column('event_id', sa.Uuid(), nullable=False),
    sa.Column('code', sa.String(length=64), nullable=False),
    sa.Column('role', sa.String(length=50), nullable=False),
    sa.Column('created_by_id', sa.Uuid(), nullable=True),
    sa.Column('max_uses', sa.Integer(), nullable=True),
    sa.Column('use_count', sa.Integer(), nullable=False),
    sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('disabled', sa.Boolean(), nullable=False),
    sa.Column('note', sa.Text(), nullable=True),
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['created_by_id'], ['users.id'], ondelete='SET NULL'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_event_invite_links_code'), 'event_invite_links', ['code'], unique=True)
    op.create_index(op.f('ix_event_invite_links_event_id'), 'event_invite_links', ['event_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_event_invite_links_event_id'), table_name='event_invite_links')
    op.drop_index(op.f('ix_event_invite_links_code'), table_name='event_invite_links')
    op.drop_table('event_invite_links')
