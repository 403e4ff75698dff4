"""access core schema: principals, catalog tree, orders, grants

Revision ID: 5a1f0c2d9e41
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '5a1f0c2d9e41'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user_profile',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('identity', sa.String(255), nullable=False, unique=True),
        sa.Column('display_name', sa.String(100), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('merchant_tier', sa.String(30), nullable=False, server_default='starter_merchant'),
        sa.Column('successful_sales_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_table(
        'collection',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('slug', sa.String(120), nullable=False, unique=True),
        sa.Column('owner_id', sa.String(36), sa.ForeignKey('user_profile.id'), nullable=False),
        sa.Column('created_by', sa.String(36), nullable=True),
        sa.Column('visible', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_index('ix_collection_owner_id', 'collection', ['owner_id'])
    op.create_table(
        'category',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('collection_id', sa.String(36), sa.ForeignKey('collection.id'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime()),
    )
    op.create_index('ix_category_collection_id', 'category', ['collection_id'])
    op.create_table(
        'product',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('collection_id', sa.String(36), sa.ForeignKey('collection.id'), nullable=False),
        sa.Column('category_id', sa.String(36), sa.ForeignKey('category.id'), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('sku', sa.String(64), nullable=True),
        sa.Column('created_at', sa.DateTime()),
    )
    op.create_index('ix_product_collection_id', 'product', ['collection_id'])
    op.create_index('ix_product_category_id', 'product', ['category_id'])
    op.create_table(
        'order',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('order_number', sa.String(32), nullable=False, unique=True),
        sa.Column('product_id', sa.String(36), sa.ForeignKey('product.id'), nullable=False),
        sa.Column('collection_id', sa.String(36), sa.ForeignKey('collection.id'), nullable=False),
        sa.Column('wallet_address', sa.String(64), nullable=False),
        sa.Column('status', sa.String(30)),
        sa.Column('amount_sol', sa.Numeric(18, 9), nullable=True),
        sa.Column('transaction_signature', sa.String(128), nullable=True),
        sa.Column('shipping_address', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_index('ix_order_wallet_address', 'order', ['wallet_address'])
    op.create_index('ix_order_collection_status', 'order', ['collection_id', 'status'])
    op.create_table(
        'access_grant',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('user_profile.id'), nullable=False),
        sa.Column('scope', sa.String(20), nullable=False),
        sa.Column('resource_id', sa.String(36), nullable=False),
        sa.Column('access_level', sa.String(10), nullable=False),
        sa.Column('granted_by', sa.String(36), nullable=True),
        sa.Column('granted_at', sa.DateTime()),
        sa.UniqueConstraint('user_id', 'scope', 'resource_id', name='uq_access_grant_user_scope'),
    )
    op.create_index('ix_access_grant_user_id', 'access_grant', ['user_id'])
    op.create_index('ix_access_grant_scope', 'access_grant', ['scope', 'resource_id'])
    op.create_table(
        'ownership_transfer_log',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('collection_id', sa.String(36), nullable=False),
        sa.Column('old_owner_id', sa.String(36), nullable=False),
        sa.Column('new_owner_id', sa.String(36), nullable=False),
        sa.Column('actor_id', sa.String(36), nullable=False),
        sa.Column('timestamp', sa.DateTime()),
    )
    op.create_index('ix_ownership_transfer_log_collection_id', 'ownership_transfer_log', ['collection_id'])


def downgrade():
    op.drop_index('ix_ownership_transfer_log_collection_id', table_name='ownership_transfer_log')
    op.drop_table('ownership_transfer_log')
    op.drop_index('ix_access_grant_scope', table_name='access_grant')
    op.drop_index('ix_access_grant_user_id', table_name='access_grant')
    op.drop_table('access_grant')
    op.drop_index('ix_order_collection_status', table_name='order')
    op.drop_index('ix_order_wallet_address', table_name='order')
    op.drop_table('order')
    op.drop_index('ix_product_category_id', table_name='product')
    op.drop_index('ix_product_collection_id', table_name='product')
    op.drop_table('product')
    op.drop_index('ix_category_collection_id', table_name='category')
    op.drop_table('category')
    op.drop_index('ix_collection_owner_id', table_name='collection')
    op.drop_table('collection')
    op.drop_table('user_profile')
