"""Initial complaint desk schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

Creates users, lookup tables, complaints with their action log and
attachments, and notifications.
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _lookup_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )


def upgrade() -> None:
    """Create all tables."""
    for name in ('branches', 'lines_of_business', 'complaint_statuses', 'complaint_types'):
        _lookup_table(name)

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, comment='ADMIN, USER'),
        sa.Column('branch_id', sa.Uuid(), sa.ForeignKey('branches.id', ondelete='SET NULL'), nullable=True),
        sa.Column('line_of_business_id', sa.Uuid(), sa.ForeignKey('lines_of_business.id', ondelete='SET NULL'), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'complaints',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('complaint_number', sa.String(30), nullable=False),
        sa.Column('customer_name', sa.String(200), nullable=False),
        sa.Column('customer_id', sa.String(100), nullable=False),
        sa.Column('policy_number', sa.String(100), nullable=False),
        sa.Column('policy_type', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('channel', sa.String(50), nullable=False),
        sa.Column('status_id', sa.Uuid(), sa.ForeignKey('complaint_statuses.id'), nullable=False),
        sa.Column('type_id', sa.Uuid(), sa.ForeignKey('complaint_types.id'), nullable=False),
        sa.Column('branch_id', sa.Uuid(), sa.ForeignKey('branches.id'), nullable=False),
        sa.Column('line_of_business_id', sa.Uuid(), sa.ForeignKey('lines_of_business.id'), nullable=False),
        sa.Column('created_by_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('assigned_to_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_complaints_complaint_number', 'complaints', ['complaint_number'], unique=True)
    op.create_index('ix_complaints_created_by_id', 'complaints', ['created_by_id'])
    op.create_index('ix_complaints_assigned_to_id', 'complaints', ['assigned_to_id'])

    op.create_table(
        'complaint_actions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('complaint_id', sa.Uuid(), sa.ForeignKey('complaints.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_complaint_actions_complaint_created', 'complaint_actions', ['complaint_id', 'created_at'])

    op.create_table(
        'attachments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('complaint_id', sa.Uuid(), sa.ForeignKey('complaints.id', ondelete='CASCADE'), nullable=False),
        sa.Column('filename', sa.String(255), nullable=False),
        sa.Column('path', sa.String(500), nullable=False),
        sa.Column('content_type', sa.String(100), nullable=True),
        sa.Column('size', sa.Integer(), nullable=False),
        sa.Column('uploaded_by_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_attachments_complaint_id', 'attachments', ['complaint_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('complaint_id', sa.Uuid(), sa.ForeignKey('complaints.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_read', 'notifications', ['read'])
    op.create_index('ix_notifications_user_read', 'notifications', ['user_id', 'read'])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('notifications')
    op.drop_table('attachments')
    op.drop_table('complaint_actions')
    op.drop_table('complaints')
    op.drop_table('users')
    for name in ('complaint_types', 'complaint_statuses', 'lines_of_business', 'branches'):
        op.drop_table(name)
