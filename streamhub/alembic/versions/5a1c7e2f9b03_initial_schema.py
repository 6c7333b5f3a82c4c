"""initial_schema

Revision ID: 5a1c7e2f9b03
Revises:
Create Date: 2026-10-16 09:12:41.503118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '5a1c7e2f9b03'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CONTENT_TYPES = ('MOVIE', 'MUSIC', 'EBOOK', 'SERIES', 'PODCAST', 'DOCUMENTARY', 'STAND_UP')
ACCESS_STATUSES = (
    'GRANTED', 'DENIED_USER_INACTIVE', 'DENIED_UNAVAILABLE', 'DENIED_NO_SUBSCRIPTION', 'DENIED_PAST_DUE',
)


def upgrade() -> None:
    op.create_table(
        'content',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('content_type', sa.Enum(*CONTENT_TYPES, name='contenttype'), nullable=False),
        sa.Column('content_url', sa.String(length=500), nullable=True),
        sa.Column('genre', sa.String(length=100), nullable=True),
        sa.Column('language', sa.String(length=50), nullable=True),
        sa.Column('rating', sa.Float(), nullable=True),
        sa.Column('thumbnail_url', sa.String(length=500), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('release_date', sa.DateTime(), nullable=True),
        sa.Column('director', sa.String(length=255), nullable=True),
        sa.Column('cast_members', sa.Text(), nullable=True),
        sa.Column('status', sa.Enum('DRAFT', 'ACTIVE', 'ARCHIVED', name='contentstatus'), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.Column('is_premium', sa.Boolean(), nullable=False),
        sa.Column('view_count', sa.BigInteger(), nullable=False),
        sa.Column('likes_count', sa.BigInteger(), nullable=False),
        sa.Column('metadata_json', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        sa.Column('updated_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_content_title'), 'content', ['title'], unique=True)
    op.create_index(op.f('ix_content_content_type'), 'content', ['content_type'], unique=False)
    op.create_index(op.f('ix_content_genre'), 'content', ['genre'], unique=False)
    op.create_index(op.f('ix_content_status'), 'content', ['status'], unique=False)
    op.create_index(op.f('ix_content_created_at'), 'content', ['created_at'], unique=False)

    op.create_table(
        'video_metadata',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('content_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('stream_url', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['content_id'], ['content.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('content_id'),
    )

    op.create_table(
        'role',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('role_name', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('role_name'),
    )
    op.create_table(
        'app_user',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('status', sa.Enum('PENDING', 'ACTIVE', 'SUSPENDED', 'DELETED', name='userstatus'), nullable=False),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        sa.Column('updated_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
    )
    op.create_index(op.f('ix_app_user_email'), 'app_user', ['email'], unique=True)
    op.create_table(
        'user_role',
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('role_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(['role_id'], ['role.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['app_user.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('user_id', 'role_id'),
    )

    op.create_table(
        'subscription_plan',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('plan_name', sa.String(length=100), nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('duration_days', sa.Integer(), nullable=False),
        sa.Column('features', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        sa.Column('updated_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('duration_days > 0', name='ck_plan_duration_positive'),
        sa.CheckConstraint('price >= 0', name='ck_plan_price_non_negative'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('plan_name'),
    )

    op.create_table(
        'subscription',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('plan_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('status', sa.Enum('ACTIVE', 'PAST_DUE', 'EXPIRED', 'CANCELLED', name='subscriptionstatus'), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        sa.Column('updated_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('start_date <= end_date', name='ck_subscription_dates'),
        sa.ForeignKeyConstraint(['plan_id'], ['subscription_plan.id']),
        sa.ForeignKeyConstraint(['user_id'], ['app_user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_subscription_user_id'), 'subscription', ['user_id'], unique=False)
    # One live (ACTIVE or PAST_DUE) subscription per user
    op.create_index(
        'uq_subscription_live_user',
        'subscription',
        ['user_id'],
        unique=True,
        postgresql_where=sa.text("status IN ('ACTIVE', 'PAST_DUE')"),
    )

    op.create_table(
        'payment_transaction',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('subscription_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('payment_method', sa.String(length=50), nullable=False),
        sa.Column('transaction_status', sa.Enum('PENDING', 'SUCCESS', 'FAILED', name='transactionstatus'), nullable=False),
        sa.Column('gateway_reference', sa.String(length=255), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('amount > 0', name='ck_payment_amount_positive'),
        sa.UniqueConstraint('subscription_id', 'sequence', name='uq_payment_subscription_sequence'),
        sa.ForeignKeyConstraint(['subscription_id'], ['subscription.id']),
        sa.ForeignKeyConstraint(['user_id'], ['app_user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_payment_transaction_subscription_id'), 'payment_transaction', ['subscription_id'], unique=False)
    op.create_index(op.f('ix_payment_transaction_user_id'), 'payment_transaction', ['user_id'], unique=False)
    op.create_index(op.f('ix_payment_transaction_created_at'), 'payment_transaction', ['created_at'], unique=False)

    op.create_table(
        'access_control_log',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('content_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('access_status', sa.Enum(*ACCESS_STATUSES, name='accessstatus'), nullable=False),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('content_title_snapshot', sa.String(length=255), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_access_control_log_content_id'), 'access_control_log', ['content_id'], unique=False)
    op.create_index(op.f('ix_access_control_log_user_id'), 'access_control_log', ['user_id'], unique=False)
    op.create_index(op.f('ix_access_control_log_timestamp'), 'access_control_log', ['timestamp'], unique=False)

    op.create_table(
        'system_audit_log',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('table_name', sa.String(length=100), nullable=False),
        sa.Column('action', sa.Enum('INSERT', 'UPDATE', 'DELETE', 'STATUS_CHANGE', name='auditaction'), nullable=False),
        sa.Column('record_id', sa.String(length=64), nullable=False),
        sa.Column('old_value', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('new_value', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('performed_by', sa.String(length=255), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_system_audit_log_table_name'), 'system_audit_log', ['table_name'], unique=False)
    op.create_index(op.f('ix_system_audit_log_timestamp'), 'system_audit_log', ['timestamp'], unique=False)

    op.create_table(
        'revenue_report',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('report_period_start', sa.Date(), nullable=False),
        sa.Column('report_period_end', sa.Date(), nullable=False),
        sa.Column('total_revenue', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('active_users_count', sa.Integer(), nullable=False),
        sa.Column('metrics', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('generated_date', sa.DateTime(), nullable=False),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        sa.CheckConstraint('report_period_start <= report_period_end', name='ck_report_period'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_revenue_report_generated_date'), 'revenue_report', ['generated_date'], unique=False)


def downgrade() -> None:
    op.drop_table('revenue_report')
    op.drop_table('system_audit_log')
    op.drop_table('access_control_log')
    op.drop_table('payment_transaction')
    op.drop_index('uq_subscription_live_user', table_name='subscription')
    op.drop_table('subscription')
    op.drop_table('subscription_plan')
    op.drop_table('user_role')
    op.drop_table('app_user')
    op.drop_table('role')
    op.drop_table('video_metadata')
    op.drop_table('content')
    for enum_name in (
        'auditaction', 'accessstatus', 'transactionstatus', 'subscriptionstatus',
        'userstatus', 'contentstatus', 'contenttype',
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
