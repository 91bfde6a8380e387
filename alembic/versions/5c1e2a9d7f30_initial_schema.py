"""initial schema: users, accounts, transactions, net worth snapshots, shared charts

Revision ID: 5c1e2a9d7f30
Revises:
Create Date: 2025-08-02 10:12:41.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c1e2a9d7f30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

account_type = sa.Enum(
    'checking', 'savings', 'investment', 'depository', 'credit', 'loan', 'other',
    name='accounttype',
)
chart_type = sa.Enum('net_worth', name='charttype')


def upgrade() -> None:
    """Upgrade schema: create all tables."""
    op.create_table(
        'user',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_user_email', 'user', ['email'], unique=True)

    op.create_table(
        'account',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('external_account_id', sa.String(), nullable=True),
        sa.Column('institution_name', sa.String(), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('account_type', account_type, nullable=False),
        sa.Column('account_subtype', sa.String(), nullable=True),
        sa.Column('mask', sa.String(), nullable=True),
        sa.Column('current_balance', sa.Numeric(15, 2), nullable=True),
        sa.Column('available_balance', sa.Numeric(15, 2), nullable=True),
        sa.Column('currency', sa.String(length=3), server_default='USD', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('last_synced', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_account_user_id', 'account', ['user_id'])
    op.create_index('ix_account_external_account_id', 'account', ['external_account_id'], unique=True)
    op.create_index('ix_account_account_type', 'account', ['account_type'])
    op.create_index('ix_account_is_active', 'account', ['is_active'])

    op.create_table(
        'transaction',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('account_id', sa.Uuid(), sa.ForeignKey('account.id', ondelete='CASCADE'), nullable=False),
        sa.Column('external_transaction_id', sa.String(), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('amount', sa.Numeric(15, 2), nullable=False),
        sa.Column('currency', sa.String(length=3), server_default='USD', nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('category_primary', sa.String(), nullable=True),
        sa.Column('merchant_name', sa.String(), nullable=True),
        sa.Column('pending', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_transaction_user_id', 'transaction', ['user_id'])
    op.create_index('ix_transaction_account_id', 'transaction', ['account_id'])
    op.create_index('ix_transaction_external_transaction_id', 'transaction', ['external_transaction_id'], unique=True)
    op.create_index('ix_transaction_date', 'transaction', ['date'])
    op.create_index('ix_transaction_category_primary', 'transaction', ['category_primary'])

    op.create_table(
        'net_worth_snapshot',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('snapshot_date', sa.Date(), nullable=False),
        sa.Column('total_assets', sa.Numeric(15, 2), nullable=False),
        sa.Column('total_liabilities', sa.Numeric(15, 2), nullable=False),
        sa.Column('net_worth', sa.Numeric(15, 2), nullable=False),
        sa.Column('account_breakdown', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('user_id', 'snapshot_date', name='uq_net_worth_snapshot_user_date'),
    )
    op.create_index('ix_net_worth_snapshot_user_id', 'net_worth_snapshot', ['user_id'])
    op.create_index('ix_net_worth_snapshot_snapshot_date', 'net_worth_snapshot', ['snapshot_date'])

    op.create_table(
        'shared_chart',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('share_token', sa.String(), nullable=False),
        sa.Column('chart_type', chart_type, nullable=False),
        sa.Column('title', sa.String(), nullable=True),
        sa.Column('chart_data', sa.JSON(), nullable=False),
        sa.Column('settings', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('view_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_shared_chart_share_token', 'shared_chart', ['share_token'], unique=True)
    op.create_index('ix_shared_chart_user_id', 'shared_chart', ['user_id'])
    op.create_index('ix_shared_chart_is_active', 'shared_chart', ['is_active'])
    op.create_index(
        'uq_shared_chart_active_user_chart_type',
        'shared_chart',
        ['user_id', 'chart_type'],
        unique=True,
        sqlite_where=sa.text('is_active'),
        postgresql_where=sa.text('is_active'),
    )


def downgrade() -> None:
    """Downgrade schema: drop all tables."""
    op.drop_table('shared_chart')
    op.drop_table('net_worth_snapshot')
    op.drop_table('transaction')
    op.drop_table('account')
    op.drop_table('user')
    chart_type.drop(op.get_bind(), checkfirst=True)
    account_type.drop(op.get_bind(), checkfirst=True)
