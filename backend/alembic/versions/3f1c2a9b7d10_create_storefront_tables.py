"""Create storefront tables

Revision ID: 3f1c2a9b7d10
Revises: 
Create Date: 2026-10-18 10:12:41.118532

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Revision identifiers used by Alembic
revision: str = '3f1c2a9b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

FILAMENT_TYPES = ('PLA', 'PETG', 'ABS', 'TPU', 'ASA')
ORDER_STATUSES = ('KRIJUAR', 'NE_PROCES', 'NE_DERGIM', 'DOREZUAR', 'ANULUAR')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'products',
        sa.Column('id', sa.String(length=32), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('type', sa.Enum(*FILAMENT_TYPES, name='filament_type'), nullable=False),
        sa.Column('color', sa.String(), nullable=True),
        sa.Column('hex', sa.String(length=16), nullable=False),
        sa.Column('weight', sa.String(), nullable=True),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('brand', sa.String(), nullable=True),
        sa.Column('price', sa.Float(), sa.CheckConstraint('price >= 0'), nullable=False),
        sa.Column('stock', sa.Integer(), sa.CheckConstraint('stock >= 0'), nullable=False),
        sa.Column('available', sa.Boolean(), nullable=False),
        sa.Column('image_url', sa.String(), nullable=True),
    )
    op.create_index('ix_products_name', 'products', ['name'])
    op.create_index('ix_products_type', 'products', ['type'])

    op.create_table(
        'orders',
        sa.Column('id', sa.String(length=32), primary_key=True),
        sa.Column('order_number', sa.String(), nullable=False),
        sa.Column('customer_name', sa.String(), nullable=False),
        sa.Column('customer_email', sa.String(), nullable=False),
        sa.Column('total', sa.Float(), nullable=False),
        sa.Column('date', sa.String(), nullable=False),
        sa.Column('status', sa.Enum(*ORDER_STATUSES, name='order_status'), nullable=False),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('address', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_orders_order_number', 'orders', ['order_number'])
    op.create_index('ix_orders_customer_email', 'orders', ['customer_email'])
    op.create_index('ix_orders_date', 'orders', ['date'])

    op.create_table(
        'user_profiles',
        sa.Column('id', sa.String(length=32), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('addresses', sa.JSON(), nullable=False),
    )
    op.create_index('ix_user_profiles_email', 'user_profiles', ['email'], unique=True)

    op.create_table(
        'logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('ts', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('actor_email', sa.String(), nullable=True),
        sa.Column('action', sa.String(length=50), nullable=True),
        sa.Column('resource', sa.String(length=50), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('ip', sa.String(length=64), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
    )
    op.create_index('ix_logs_ts', 'logs', ['ts'])
    op.create_index('ix_logs_actor_email', 'logs', ['actor_email'])
    op.create_index('ix_logs_action', 'logs', ['action'])
    op.create_index('ix_logs_resource', 'logs', ['resource'])
    op.create_index('ix_logs_status', 'logs', ['status'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('logs')
    op.drop_table('user_profiles')
    op.drop_table('orders')
    op.drop_table('products')
