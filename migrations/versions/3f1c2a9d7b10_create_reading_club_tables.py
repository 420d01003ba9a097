"""create_reading_club_tables

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2025-03-01 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1c2a9d7b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('nickname', sa.String(length=50), nullable=False),
    sa.Column('avatar_url', sa.String(length=255), nullable=True),
    sa.Column('api_token', sa.String(length=64), nullable=True),
    sa.Column('is_active', sa.Boolean(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_api_token', 'users', ['api_token'], unique=True)

    op.create_table('reading_events',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('title', sa.String(length=200), nullable=False),
    sa.Column('book_name', sa.String(length=200), nullable=False),
    sa.Column('owner_id', sa.Integer(), nullable=False),
    sa.Column('start_date', sa.Date(), nullable=False),
    sa.Column('end_date', sa.Date(), nullable=False),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('approval_status', sa.String(length=20), nullable=False),
    sa.Column('approved_at', sa.DateTime(), nullable=True),
    sa.Column('assignment_policy', sa.String(length=20), nullable=False),
    sa.Column('max_leadership_count', sa.Integer(), nullable=True),
    sa.Column('content_days_before', sa.Integer(), nullable=False),
    sa.Column('content_days_after', sa.Integer(), nullable=False),
    sa.Column('engagement_days_after', sa.Integer(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.CheckConstraint('end_date >= start_date', name='ck_reading_events_date_range'),
    sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_reading_events_status', 'reading_events', ['status', 'approval_status'], unique=False)
    op.create_index('idx_reading_events_owner', 'reading_events', ['owner_id'], unique=False)

    op.create_table('event_enrollments',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('event_id', sa.Integer(), nullable=False),
    sa.Column('user_id', sa.Integer(), nullable=False),
    sa.Column('enrollment_type', sa.String(length=20), nullable=False),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('enrolled_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['event_id'], ['reading_events.id'], ),
    sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('event_id', 'user_id', name='uq_event_enrollments_event_user')
    )
    op.create_index('idx_event_enrollments_status', 'event_enrollments', ['event_id', 'status'], unique=False)

    op.create_table('reading_schedules',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('event_id', sa.Integer(), nullable=False),
    sa.Column('day_number', sa.Integer(), nullable=False),
    sa.Column('date', sa.Date(), nullable=False),
    sa.Column('reading_progress', sa.String(length=200), nullable=False),
    sa.Column('daily_leader_id', sa.Integer(), nullable=True),
    sa.Column('content_published_at', sa.DateTime(), nullable=True),
    sa.Column('check_in_count', sa.Integer(), nullable=False),
    sa.Column('engagement_count', sa.Integer(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.Column('updated_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['daily_leader_id'], ['users.id'], ),
    sa.ForeignKeyConstraint(['event_id'], ['reading_events.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('event_id', 'day_number', name='uq_reading_schedules_event_day')
    )
    op.create_index('idx_reading_schedules_date', 'reading_schedules', ['date'], unique=False)
    op.create_index('idx_reading_schedules_leader', 'reading_schedules', ['daily_leader_id'], unique=False)

    op.create_table('leader_assignment_logs',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('event_id', sa.Integer(), nullable=False),
    sa.Column('schedule_id', sa.Integer(), nullable=False),
    sa.Column('action', sa.String(length=20), nullable=False),
    sa.Column('actor_id', sa.Integer(), nullable=True),
    sa.Column('old_leader_id', sa.Integer(), nullable=True),
    sa.Column('new_leader_id', sa.Integer(), nullable=True),
    sa.Column('note', sa.String(length=200), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['actor_id'], ['users.id'], ),
    sa.ForeignKeyConstraint(['event_id'], ['reading_events.id'], ),
    sa.ForeignKeyConstraint(['schedule_id'], ['reading_schedules.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_leader_logs_event', 'leader_assignment_logs', ['event_id', 'created_at'], unique=False)
    op.create_index('idx_leader_logs_schedule', 'leader_assignment_logs', ['schedule_id'], unique=False)


def downgrade():
    op.drop_index('idx_leader_logs_schedule', table_name='leader_assignment_logs')
    op.drop_index('idx_leader_logs_event', table_name='leader_assignment_logs')
    op.drop_table('leader_assignment_logs')

    op.drop_index('idx_reading_schedules_leader', table_name='reading_schedules')
    op.drop_index('idx_reading_schedules_date', table_name='reading_schedules')
    op.drop_table('reading_schedules')

    op.drop_index('idx_event_enrollments_status', table_name='event_enrollments')
    op.drop_table('event_enrollments')

    op.drop_index('idx_reading_events_owner', table_name='reading_events')
    op.drop_index('idx_reading_events_status', table_name='reading_events')
    op.drop_table('reading_events')

    op.drop_index('ix_users_api_token', table_name='users')
    op.drop_table('users')
