"""Initial LodgeFlow schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

Leads, residents (students / tourists), studios, invoices, payment plans
and audit log. Money as INTEGER PENCE (BIGINT).
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
    # === STUDIOS ===
    op.create_table(
        'studios',
        sa.Column('id', sa.String(50), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('view', sa.String(100), nullable=True),
        sa.Column('floor', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('room_grade', sa.String(100), nullable=True, index=True),
        sa.Column('occupied', sa.Boolean(), nullable=False, server_default=sa.false(), index=True),
        sa.Column('occupied_by', sa.Integer(), nullable=True),
        sa.Column('occupied_by_type', sa.Enum('STUDENT', 'TOURIST', name='residenttype'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "(occupied AND occupied_by IS NOT NULL) OR (NOT occupied AND occupied_by IS NULL)",
            name='ck_studio_occupancy_consistent'
        ),
    )

    # === LEADS ===
    op.create_table(
        'leads',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('status', sa.String(50), nullable=False, server_default='New', index=True),
        sa.Column('source', sa.String(100), nullable=True, index=True),
        sa.Column('response_category', sa.String(100), nullable=True),
        sa.Column('follow_up_stage', sa.String(100), nullable=True),
        sa.Column('room_grade', sa.String(100), nullable=True),
        sa.Column('duration', sa.String(100), nullable=True),
        sa.Column('assigned_to', sa.String(50), nullable=True),
        sa.Column('revenue_cents', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('date_of_inquiry', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    # === STUDENTS (long-stay) ===
    op.create_table(
        'students',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('room_grade', sa.String(100), nullable=True),
        sa.Column('checkin', sa.Date(), nullable=False),
        sa.Column('duration', sa.String(100), nullable=True),
        sa.Column('revenue_cents', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('assigned_to', sa.String(50), sa.ForeignKey('studios.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('payment_plan_id', sa.Integer(), nullable=True),
        sa.Column('wants_installments', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('installment_plan_name', sa.String(255), nullable=True),
        sa.Column('payment_cycles', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    # === TOURISTS (short-stay) ===
    op.create_table(
        'tourists',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('room_grade', sa.String(100), nullable=True),
        sa.Column('checkin', sa.Date(), nullable=False),
        sa.Column('checkout', sa.Date(), nullable=False),
        sa.Column('duration', sa.String(100), nullable=True),
        sa.Column('revenue_cents', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('assigned_to', sa.String(50), sa.ForeignKey('studios.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('status', sa.Enum('ACTIVE', 'CHECKED_OUT', 'CANCELLED', name='touriststatus'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('checkout >= checkin', name='ck_tourist_checkout_after_checkin'),
    )

    # === PAYMENT PLANS ===
    op.create_table(
        'payment_plans',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('amount_cents', sa.BigInteger(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='GBP'),
        sa.Column('duration_weeks', sa.Integer(), nullable=False),
        sa.Column('payment_cycles', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    # === INVOICES ===
    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('invoice_number', sa.String(100), unique=True, nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('students.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('tourist_id', sa.Integer(), sa.ForeignKey('tourists.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('payment_plan_id', sa.Integer(), nullable=True),
        sa.Column('amount_cents', sa.BigInteger(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='GBP'),
        sa.Column('status', sa.Enum('PENDING', 'PAID', 'OVERDUE', 'CANCELLED', name='invoicestatus'), nullable=False, index=True),
        sa.Column('issued_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('amount_cents >= 0', name='ck_invoice_amount_non_negative'),
    )

    # === AUDIT LOG ===
    op.create_table(
        'audit_log',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('action', sa.Enum(
            'LEAD_CONVERTED', 'RESIDENT_CREATED', 'RESIDENT_REASSIGNED',
            'RESIDENT_DELETED', 'STUDIO_RELEASED',
            name='auditaction'
        ), nullable=False, index=True),
        sa.Column('resource_type', sa.String(50), nullable=False),
        sa.Column('resource_id', sa.String(50), nullable=False),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_audit_log_resource', 'audit_log', ['resource_type', 'resource_id'])


def downgrade() -> None:
    op.drop_index('ix_audit_log_resource', table_name='audit_log')
    op.drop_table('audit_log')
    op.drop_table('invoices')
    op.drop_table('payment_plans')
    op.drop_table('tourists')
    op.drop_table('students')
    op.drop_table('leads')
    op.drop_table('studios')
    sa.Enum(name='auditaction').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='invoicestatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='touriststatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='residenttype').drop(op.get_bind(), checkfirst=True)
