"""initial attendance schema: employees, attendance_events, audit_logs

Revision ID: 4f1d2a7c9e10
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '4f1d2a7c9e10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='employee'),
        sa.Column('department', sa.String(length=120), nullable=False, server_default='General'),
        sa.Column('code', sa.String(length=64), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("role in ('employee','admin')", name='ck_employee_role'),
        sa.UniqueConstraint('code'),
    )
    op.create_index('ix_employees_email', 'employees', ['email'], unique=True)

    op.create_table(
        'attendance_events',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('work_date', sa.Date(), nullable=False),
        sa.Column('kind', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('check_in_time', sa.DateTime(), nullable=True),
        sa.Column('lunch_out_time', sa.DateTime(), nullable=True),
        sa.Column('lunch_in_time', sa.DateTime(), nullable=True),
        sa.Column('check_out_time', sa.DateTime(), nullable=True),
        sa.Column('remarks', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('marked_by', sa.String(length=255), nullable=False, server_default='system'),
        sa.Column('marked_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_attendance_events_employee_id', 'attendance_events', ['employee_id'])
    op.create_index('ix_attendance_events_work_date', 'attendance_events', ['work_date'])
    op.create_index('ix_attendance_events_status', 'attendance_events', ['status'])
    op.create_index('ix_attendance_events_marked_at', 'attendance_events', ['marked_at'])
    op.create_index('ix_attendance_employee_date', 'attendance_events', ['employee_id', 'work_date'])
    op.create_index('ix_attendance_date_status', 'attendance_events', ['work_date', 'status'])

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='SET NULL'), nullable=True),
        sa.Column('action', sa.String(length=32), nullable=False),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('details', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=True),
        sa.Column('outcome', sa.String(length=16), nullable=False, server_default='success'),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_logs_timestamp', 'audit_logs', ['timestamp'])
    op.create_index('ix_audit_employee_ts', 'audit_logs', ['employee_id', 'timestamp'])
    op.create_index('ix_audit_action_ts', 'audit_logs', ['action', 'timestamp'])


def downgrade() -> None:
    op.drop_table('audit_logs')
    op.drop_table('attendance_events')
    op.drop_table('employees')
