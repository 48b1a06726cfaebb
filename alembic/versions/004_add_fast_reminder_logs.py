"""add fast_reminder_logs ledger

The unique constraint on (fast_id, date_key, time_key) is what makes reminder
delivery exactly-once in effect; workers insert with ON CONFLICT DO NOTHING.

Revision ID: 004_add_fast_reminder_logs
Revises: 003_add_notifications
Create Date: 2025-10-02
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '004_add_fast_reminder_logs'
down_revision = '003_add_notifications'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'fast_reminder_logs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('fast_id', sa.Integer(), sa.ForeignKey('fasts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('date_key', sa.String(length=10), nullable=False),
        sa.Column('time_key', sa.String(length=5), nullable=False),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.UniqueConstraint('fast_id', 'date_key', 'time_key', name='uq_fast_reminder_logs_slot'),
    )
    op.create_index('ix_fast_reminder_logs_user_id', 'fast_reminder_logs', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_fast_reminder_logs_user_id', table_name='fast_reminder_logs')
    op.drop_table('fast_reminder_logs')
