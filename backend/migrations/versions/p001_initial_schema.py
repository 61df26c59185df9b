"""Initial schema: admins, POS businesses, catalog, transactions, sessions

Creates:
1. admin_users
2. pos_businesses (approval status + receipt configuration)
3. products (per-business catalog, stock >= 0 enforced by CHECK)
4. transactions + transaction_lines (append-only sales ledger)
5. receipt_sequences (per-business receipt counters)
6. session_tokens (server-side bearer sessions)

Revision ID: p001_initial_schema
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'p001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('admin_users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_admin_users_username', 'admin_users', ['username'], unique=True)

    op.create_table('pos_businesses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('business_name', sa.String(length=255), nullable=False),
        sa.Column('contact_email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('currency_symbol', sa.String(length=8), nullable=False, server_default='$'),
        sa.Column('business_address', sa.String(length=255), nullable=True),
        sa.Column('business_phone', sa.String(length=64), nullable=True),
        sa.Column('receipt_footer', sa.Text(), nullable=True),
        sa.Column('tax_rate', sa.String(length=16), nullable=False, server_default='8.5'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('approved_by_admin_id', sa.Integer(), nullable=True),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name='ck_pos_businesses_status'),
        sa.ForeignKeyConstraint(['approved_by_admin_id'], ['admin_users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_pos_businesses_username', 'pos_businesses', ['username'], unique=True)
    op.create_index('ix_pos_businesses_status', 'pos_businesses', ['status'])

    op.create_table('products',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('pos_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=False, server_default='general'),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('image_url', sa.String(length=1024), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.CheckConstraint('stock >= 0', name='ck_products_stock_non_negative'),
        sa.CheckConstraint('price_cents >= 0', name='ck_products_price_non_negative'),
        sa.ForeignKeyConstraint(['pos_id'], ['pos_businesses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_products_pos_id', 'products', ['pos_id'])
    op.create_index('ix_products_pos_active', 'products', ['pos_id', 'is_active'])

    op.create_table('transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('pos_id', sa.Integer(), nullable=False),
        sa.Column('receipt_number', sa.String(length=32), nullable=False),
        sa.Column('subtotal_cents', sa.Integer(), nullable=False),
        sa.Column('tax_cents', sa.Integer(), nullable=False),
        sa.Column('total_cents', sa.Integer(), nullable=False),
        sa.Column('tax_rate', sa.String(length=16), nullable=False),
        sa.Column('payment_method', sa.String(length=8), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("payment_method IN ('cash', 'card')", name='ck_transactions_payment_method'),
        sa.ForeignKeyConstraint(['pos_id'], ['pos_businesses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('pos_id', 'receipt_number', name='uq_transactions_pos_receipt'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_transactions_pos_id', 'transactions', ['pos_id'])
    op.create_index('ix_transactions_pos_created', 'transactions', ['pos_id', 'created_at'])

    op.create_table('transaction_lines',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('transaction_id', sa.Integer(), nullable=False),
        sa.Column('line_number', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('unit_price_cents', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['transaction_id'], ['transactions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('transaction_id', 'line_number', name='uq_transaction_lines_number'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_transaction_lines_transaction_id', 'transaction_lines', ['transaction_id'])

    op.create_table('receipt_sequences',
        sa.Column('pos_id', sa.Integer(), nullable=False),
        sa.Column('next_number', sa.Integer(), nullable=False, server_default='1'),
        sa.ForeignKeyConstraint(['pos_id'], ['pos_businesses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('pos_id'),
    )

    op.create_table('session_tokens',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('principal_kind', sa.String(length=8), nullable=False),
        sa.Column('principal_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_used_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.Column('revoked_reason', sa.String(length=255), nullable=True),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_session_tokens_token_hash', 'session_tokens', ['token_hash'], unique=True)
    op.create_index('ix_session_tokens_is_revoked', 'session_tokens', ['is_revoked'])
    op.create_index('ix_session_tokens_principal', 'session_tokens', ['principal_kind', 'principal_id'])


def downgrade():
    op.drop_index('ix_session_tokens_principal', table_name='session_tokens')
    op.drop_index('ix_session_tokens_is_revoked', table_name='session_tokens')
    op.drop_index('ix_session_tokens_token_hash', table_name='session_tokens')
    op.drop_table('session_tokens')
    op.drop_table('receipt_sequences')
    op.drop_index('ix_transaction_lines_transaction_id', table_name='transaction_lines')
    op.drop_table('transaction_lines')
    op.drop_index('ix_transactions_pos_created', table_name='transactions')
    op.drop_index('ix_transactions_pos_id', table_name='transactions')
    op.drop_table('transactions')
    op.drop_index('ix_products_pos_active', table_name='products')
    op.drop_index('ix_products_pos_id', table_name='products')
    op.drop_table('products')
    op.drop_index('ix_pos_businesses_status', table_name='pos_businesses')
    op.drop_index('ix_pos_businesses_username', table_name='pos_businesses')
    op.drop_table('pos_businesses')
    op.drop_index('ix_admin_users_username', table_name='admin_users')
    op.drop_table('admin_users')
