"""create spendiq tables

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-02-07

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0a1b2c3d4e5f'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('parent_id', sa.Integer(), sa.ForeignKey('categories.id'), nullable=True, index=True),
        sa.Column('color_hex', sa.String(7), nullable=True),
    )

    op.create_table(
        'budgets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), nullable=False, index=True),
        sa.Column('period_start', sa.Date(), nullable=False),
        sa.Column('period_end', sa.Date(), nullable=False),
        sa.Column('total_budget_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('user_id', 'period_start', name='uq_budget_user_period'),
    )

    op.create_table(
        'budget_lines',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('budget_id', sa.Integer(), sa.ForeignKey('budgets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id'), nullable=False),
        sa.Column('planned_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('budget_id', 'category_id', name='uq_budget_line'),
    )
    op.create_index('ix_budget_line_budget', 'budget_lines', ['budget_id'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), nullable=False, index=True),
        sa.Column('account_id', sa.Integer(), nullable=True),
        sa.Column('plaid_item_id', sa.Integer(), nullable=True),
        sa.Column('plaid_transaction_id', sa.String(255), nullable=True, unique=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('direction', sa.String(10), nullable=False),
        sa.Column('name', sa.Text(), nullable=True),
        sa.Column('merchant_name', sa.Text(), nullable=True),
        sa.Column('transaction_date', sa.Date(), nullable=False, index=True),
        sa.Column('pending', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_manual', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_transactions_user_date', 'transactions', ['user_id', 'transaction_date'])

    op.create_table(
        'transaction_categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('transaction_id', sa.Integer(), sa.ForeignKey('transactions.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id'), nullable=False, index=True),
        sa.Column('source', sa.String(20), nullable=False, server_default='user'),
    )

    op.create_table(
        'plaid_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), nullable=False, index=True),
        sa.Column('plaid_item_id', sa.String(255), nullable=False, unique=True),
        sa.Column('institution_name', sa.String(255), nullable=True),
        sa.Column('status', sa.String(32), nullable=False, server_default='active'),
        sa.Column('last_sync_at', sa.TIMESTAMP(timezone=True), nullable=True),
    )

    op.create_table(
        'user_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), nullable=False, unique=True),
        sa.Column('timezone', sa.String(64), nullable=False),
        sa.Column('currency_code', sa.String(3), nullable=False),
        sa.Column('week_starts_on', sa.SmallInteger(), nullable=False),
        sa.Column('status_on_track_max', sa.Float(), nullable=False),
        sa.Column('status_tight_max', sa.Float(), nullable=False),
        sa.Column('baseline_months', sa.Integer(), nullable=False),
        sa.Column('include_pending_in_insights', sa.Boolean(), nullable=False),
        sa.Column('insights_enabled', sa.Boolean(), nullable=False),
        sa.Column('encouragement_insights_enabled', sa.Boolean(), nullable=False),
        sa.Column('spike_alert_threshold_pct', sa.Float(), nullable=False),
        sa.Column('ai_personalities', postgresql.JSONB(), nullable=False),
        sa.Column('ai_frugal_score', sa.Integer(), nullable=False),
        sa.Column('ai_advice_score', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'chat_messages',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(16), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_chat_messages_user_created', 'chat_messages', ['user_id', 'created_at'])


def downgrade() -> None:
    op.drop_index('ix_chat_messages_user_created', table_name='chat_messages')
    op.drop_table('chat_messages')
    op.drop_table('user_settings')
    op.drop_table('plaid_items')
    op.drop_table('transaction_categories')
    op.drop_index('ix_transactions_user_date', table_name='transactions')
    op.drop_table('transactions')
    op.drop_index('ix_budget_line_budget', table_name='budget_lines')
    op.drop_table('budget_lines')
    op.drop_table('budgets')
    op.drop_table('categories')
    op.drop_table('users')
