"""initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create accounts table
    op.create_table(
        'accounts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('balance', sa.Numeric(precision=20, scale=2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('balance >= 0', name='ck_account_balance_non_negative'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_accounts_id'), 'accounts', ['id'], unique=False)
    op.create_index(op.f('ix_accounts_email'), 'accounts', ['email'], unique=True)

    # Create ledger_entries table
    op.create_table(
        'ledger_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('entry_id', sa.String(length=36), nullable=False),
        sa.Column('transfer_id', sa.String(length=36), nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('entry_type', sa.Enum('send', 'receive', 'charge', name='entrytype'), nullable=False),
        sa.Column('status', sa.Enum('completed', 'pending', 'failed', name='entrystatus'), nullable=False),
        sa.Column('amount', sa.Numeric(precision=20, scale=2), nullable=False),
        sa.Column('sender_email', sa.String(length=255), nullable=True),
        sa.Column('recipient_email', sa.String(length=255), nullable=True),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('balance_after', sa.Numeric(precision=20, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('amount > 0', name='ck_ledger_amount_positive'),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_ledger_entries_id'), 'ledger_entries', ['id'], unique=False)
    op.create_index(op.f('ix_ledger_entries_entry_id'), 'ledger_entries', ['entry_id'], unique=True)
    op.create_index('idx_ledger_account_created', 'ledger_entries', ['account_id', 'created_at'], unique=False)
    op.create_index('idx_ledger_sender_email', 'ledger_entries', ['sender_email'], unique=False)
    op.create_index('idx_ledger_recipient_email', 'ledger_entries', ['recipient_email'], unique=False)
    op.create_index('idx_ledger_transfer', 'ledger_entries', ['transfer_id'], unique=False)

    # Create idempotency_logs table
    op.create_table(
        'idempotency_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('idempotency_key', sa.String(length=255), nullable=False),
        sa.Column('request_path', sa.String(length=255), nullable=False),
        sa.Column('request_method', sa.String(length=10), nullable=False),
        sa.Column('request_hash', sa.String(length=64), nullable=False),
        sa.Column('response_status', sa.Integer(), nullable=True),
        sa.Column('response_body', sa.String(length=5000), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_idempotency_logs_id'), 'idempotency_logs', ['id'], unique=False)
    op.create_index(op.f('ix_idempotency_logs_idempotency_key'), 'idempotency_logs', ['idempotency_key'], unique=True)
    op.create_index('idx_idempotency_expires', 'idempotency_logs', ['expires_at'], unique=False)


def downgrade() -> None:
    # Drop tables in reverse order
    op.drop_index('idx_idempotency_expires', table_name='idempotency_logs')
    op.drop_index(op.f('ix_idempotency_logs_idempotency_key'), table_name='idempotency_logs')
    op.drop_index(op.f('ix_idempotency_logs_id'), table_name='idempotency_logs')
    op.drop_table('idempotency_logs')

    op.drop_index('idx_ledger_transfer', table_name='ledger_entries')
    op.drop_index('idx_ledger_recipient_email', table_name='ledger_entries')
    op.drop_index('idx_ledger_sender_email', table_name='ledger_entries')
    op.drop_index('idx_ledger_account_created', table_name='ledger_entries')
    op.drop_index(op.f('ix_ledger_entries_entry_id'), table_name='ledger_entries')
    op.drop_index(op.f('ix_ledger_entries_id'), table_name='ledger_entries')
    op.drop_table('ledger_entries')
    sa.Enum(name='entrystatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='entrytype').drop(op.get_bind(), checkfirst=True)

    op.drop_index(op.f('ix_accounts_email'), table_name='accounts')
    op.drop_index(op.f('ix_accounts_id'), table_name='accounts')
    op.drop_table('accounts')
