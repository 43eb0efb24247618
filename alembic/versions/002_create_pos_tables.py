"""Create POS settings, sales and barcode scan tables.

Revision ID: 002
Revises: 001
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create pos_settings, pos_sales and barcode_scans tables."""
    # Per-seller POS settings, one row per seller
    op.create_table(
        'pos_settings',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('seller_id', sa.String(36), nullable=False, unique=True),
        sa.Column('tax_enabled', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('tax_rate', sa.Numeric(5, 2), nullable=False, server_default='12'),
        sa.Column('tax_name', sa.String(50), nullable=False, server_default='VAT'),
        sa.Column('tax_inclusive', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('accept_cash', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('accept_card', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('accept_ewallet', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('accept_bank_transfer', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('receipt_header', sa.Text(), nullable=True),
        sa.Column('receipt_footer', sa.Text(), nullable=True),
        sa.Column('auto_add_on_scan', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('enable_low_stock_alert', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('low_stock_threshold', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    # Completed POS sales
    op.create_table(
        'pos_sales',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('seller_id', sa.String(36), nullable=False, index=True),
        sa.Column('payment_method', sa.String(20), nullable=False),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=False),
        sa.Column('tax', sa.Numeric(12, 2), nullable=False),
        sa.Column('total', sa.Numeric(12, 2), nullable=False),
        sa.Column('lines', postgresql.JSONB, nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    # Barcode scan log
    op.create_table(
        'barcode_scans',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('vendor_id', sa.String(36), nullable=False, index=True),
        sa.Column('barcode_value', sa.String(100), nullable=False),
        sa.Column('product_id', sa.String(36), nullable=True),
        sa.Column('variant_id', sa.String(36), nullable=True),
        sa.Column('is_successful', sa.Boolean(), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('scan_source', sa.String(20), nullable=False, server_default='pos'),
        sa.Column('scanner_type', sa.String(20), nullable=False, server_default='hardware'),
        sa.Column('scan_duration_ms', sa.Integer(), nullable=True),
        sa.Column('scan_timestamp', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    # Index for per-seller scan history
    op.create_index(
        'ix_barcode_scans_vendor_timestamp',
        'barcode_scans',
        ['vendor_id', 'scan_timestamp'],
    )


def downgrade() -> None:
    """Drop POS tables."""
    op.drop_index('ix_barcode_scans_vendor_timestamp', table_name='barcode_scans')
    op.drop_table('barcode_scans')
    op.drop_table('pos_sales')
    op.drop_table('pos_settings')
