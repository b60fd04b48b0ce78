"""initial schema

Revision ID: a1c0f3e9b2d4
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = 'a1c0f3e9b2d4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


USER_ROLE = ('admin', 'member', 'guest')
USER_POSITION = ('officer', 'reserve', 'admin', 'staff')
COMPLETION_STATUS = ('pending', 'completed', 'excused')


def _base_columns():
    return [
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _assignment_columns():
    return [
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column(
            'completion_status',
            postgresql.ENUM(*COMPLETION_STATUS, name='completion_status', create_type=False),
            nullable=False,
            server_default='pending',
        ),
        sa.Column('completion_notes', sa.Text(), nullable=True),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    # Shared by the four assignment tables, so created once up front
    postgresql.ENUM(*COMPLETION_STATUS, name='completion_status').create(bind, checkfirst=True)

    op.create_table(
        'users',
        *_base_columns(),
        sa.Column('email', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('role', sa.Enum(*USER_ROLE, name='user_role'), nullable=False, server_default='guest'),
        sa.Column('position', sa.Enum(*USER_POSITION, name='user_position'), nullable=False, server_default='reserve'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        'events',
        *_base_columns(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column(
            'event_type',
            sa.Enum('patrol', 'training', 'meeting', 'community_event', 'special_event', name='event_type'),
            nullable=False,
        ),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column('starts_at', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('ends_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
    )

    op.create_table(
        'trainings',
        *_base_columns(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column('training_type', sa.String(100), nullable=False),
        sa.Column('instructor', sa.String(200), nullable=False),
        sa.Column('starts_at', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('ends_at', sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        'policies',
        *_base_columns(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('policy_type', sa.String(100), nullable=False),
        sa.Column('policy_number', sa.String(50), nullable=False, unique=True),
        sa.Column('policy_url', sa.String(500), nullable=False),
        sa.Column('effective_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        'equipment',
        *_base_columns(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('serial_number', sa.String(100), nullable=True, index=True),
        sa.Column('purchase_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_assigned', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('assigned_to', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('is_obsolete', sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    # ---------------- Assignment tables ----------------
    op.create_table(
        'event_assignments',
        *_base_columns(),
        sa.Column('event_id', sa.Uuid(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False, index=True),
        *_assignment_columns(),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_event_assignments_event_user'),
    )

    op.create_table(
        'training_assignments',
        *_base_columns(),
        sa.Column('training_id', sa.Uuid(), sa.ForeignKey('trainings.id', ondelete='CASCADE'), nullable=False, index=True),
        *_assignment_columns(),
        sa.UniqueConstraint('training_id', 'user_id', name='uq_training_assignments_training_user'),
    )

    op.create_table(
        'equipment_assignments',
        *_base_columns(),
        sa.Column('equipment_id', sa.Uuid(), sa.ForeignKey('equipment.id', ondelete='CASCADE'), nullable=False, index=True),
        *_assignment_columns(),
        sa.Column(
            'condition',
            sa.Enum('new', 'good', 'fair', 'poor', 'damaged/broken', name='equipment_condition'),
            nullable=False,
            server_default='good',
        ),
        sa.Column('checked_out_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('checked_in_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('expected_return_at', sa.DateTime(timezone=True), nullable=True, index=True),
        sa.UniqueConstraint('equipment_id', 'user_id', name='uq_equipment_assignments_equipment_user'),
    )

    op.create_table(
        'policy_completions',
        *_base_columns(),
        sa.Column('policy_id', sa.Uuid(), sa.ForeignKey('policies.id', ondelete='CASCADE'), nullable=False, index=True),
        *_assignment_columns(),
        sa.Column('acknowledged_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('policy_id', 'user_id', name='uq_policy_completions_policy_user'),
    )

    # ---------------- Applications ----------------
    op.create_table(
        'applications',
        *_base_columns(),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(30), nullable=False),
        sa.Column('driver_license', sa.String(50), nullable=False),
        sa.Column('street_address', sa.String(255), nullable=False),
        sa.Column('city', sa.String(100), nullable=False),
        sa.Column('state', sa.String(50), nullable=False),
        sa.Column('zip_code', sa.String(20), nullable=False),
        sa.Column(
            'prior_experience',
            sa.Enum('none', 'less_than_1_year', '1_to_3_years', 'more_than_3_years', name='prior_experience'),
            nullable=False,
        ),
        sa.Column(
            'availability',
            sa.Enum('weekdays', 'weekends', 'both', 'flexible', name='availability'),
            nullable=False,
        ),
        sa.Column('resume', sa.Text(), nullable=True),
        sa.Column(
            'position',
            sa.Enum(*USER_POSITION, name='application_position'),
            nullable=False,
            server_default='reserve',
        ),
        sa.Column(
            'status',
            sa.Enum('pending', 'approved', 'rejected', name='application_status'),
            nullable=False,
            server_default='pending',
        ),
    )

    # ---------------- Notifications ----------------
    op.create_table(
        'notifications',
        *_base_columns(),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('type', sa.String(50), nullable=False, server_default='general', index=True),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('url', sa.String(500), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reminder_entity_id', sa.Uuid(), nullable=True),
        sa.Column('reminder_kind', sa.String(50), nullable=True),
        sa.Column('reminder_occurrence_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            'reminder_entity_id', 'user_id', 'reminder_kind', 'reminder_occurrence_at',
            name='uq_notifications_reminder_key',
        ),
    )


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('applications')
    op.drop_table('policy_completions')
    op.drop_table('equipment_assignments')
    op.drop_table('training_assignments')
    op.drop_table('event_assignments')
    op.drop_table('equipment')
    op.drop_table('policies')
    op.drop_table('trainings')
    op.drop_table('events')
    op.drop_table('users')

    bind = op.get_bind()
    for name in (
        'application_status', 'availability', 'prior_experience', 'application_position',
        'equipment_condition', 'completion_status', 'event_type', 'user_position', 'user_role',
    ):
        sa.Enum(name=name).drop(bind, checkfirst=True)
