"""add fasts table

Revision ID: 001_add_fasts
Revises:
Create Date: 2025-10-02
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '001_add_fasts'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'fasts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='upcoming'),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reminder_enabled', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('prayer_times', postgresql.JSONB(), nullable=True),
        sa.Column('prayer_focus', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.CheckConstraint("status IN ('upcoming', 'active', 'completed')", name='ck_fasts_status'),
    )
    op.create_index('ix_fasts_user_id', 'fasts', ['user_id'])
    op.create_index('ix_fasts_status_start', 'fasts', ['status', 'start_time'])
    op.create_index('ix_fasts_status_end', 'fasts', ['status', 'end_time'])
    op.create_index('ix_fasts_status_reminder', 'fasts', ['status', 'reminder_enabled'])


def downgrade() -> None:
    op.drop_index('ix_fasts_status_reminder', table_name='fasts')
    op.drop_index('ix_fasts_status_end', table_name='fasts')
    op.drop_index('ix_fasts_status_start', table_name='fasts')
    op.drop_index('ix_fasts_user_id', table_name='fasts')
    op.drop_table('fasts')
