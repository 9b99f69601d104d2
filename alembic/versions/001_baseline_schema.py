"""Baseline warehouse schema

Revision ID: 001_baseline_schema
Revises:
Create Date: 2026-10-19

Tables:
- Catalog: products, suppliers, customers
- Inventory: lots, inventory_movements, cycle_counts
- Reception: reception_orders, reception_lines, reception_discrepancies
- Orders: orders, order_lines
- Fleet: vehicles, drivers, routes, vehicle_maintenance, pre_departure_checklists
- Support: audit_logs, document_sequences

Status columns are VARCHAR(50), never native ENUMs.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_baseline_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    # ==================== catalog ====================
    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('sku', sa.String(50), nullable=False, unique=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('brand', sa.String(50), nullable=False),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('barcode', sa.String(50), nullable=True),
        sa.Column('weight_kg', sa.Numeric(10, 3)),
        sa.Column('length_cm', sa.Numeric(10, 2)),
        sa.Column('width_cm', sa.Numeric(10, 2)),
        sa.Column('height_cm', sa.Numeric(10, 2)),
        sa.Column('is_fragile', sa.Boolean()),
        sa.Column('unit_price', sa.Numeric(12, 2)),
        sa.Column('is_active', sa.Boolean()),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_index('idx_products_brand', 'products', ['brand'])
    op.create_index('idx_products_category', 'products', ['category'])

    op.create_table(
        'suppliers',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('brand', sa.String(50), nullable=False),
        sa.Column('tax_id', sa.String(20), nullable=True),
        sa.Column('contact_name', sa.String(200), nullable=True),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('email', sa.String(200), nullable=True),
        sa.Column('is_active', sa.Boolean()),
        _timestamp('created_at'),
    )

    op.create_table(
        'customers',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('tax_id', sa.String(20), nullable=True),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('postal_code', sa.String(10), nullable=True),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('email', sa.String(200), nullable=True),
        sa.Column('credit_limit', sa.Numeric(14, 2)),
        sa.Column('is_active', sa.Boolean()),
        _timestamp('created_at'),
    )

    # ==================== inventory ====================
    op.create_table(
        'lots',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('lot_number', sa.String(50), nullable=False),
        sa.Column('expiration_date', sa.Date(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('location', sa.String(50), nullable=True),
        _timestamp('last_movement_at', nullable=True),
        _timestamp('created_at'),
        sa.CheckConstraint('quantity >= 0', name='ck_lots_quantity_non_negative'),
    )
    op.create_index('idx_lots_product_status', 'lots', ['product_id', 'status'])
    op.create_index('idx_lots_expiration', 'lots', ['expiration_date'])

    op.create_table(
        'inventory_movements',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('lot_id', sa.Uuid(), sa.ForeignKey('lots.id'), nullable=False),
        sa.Column('movement_type', sa.String(50), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('previous_quantity', sa.Integer(), nullable=False),
        sa.Column('new_quantity', sa.Integer(), nullable=False),
        sa.Column('reference_type', sa.String(50), nullable=True),
        sa.Column('reference_id', sa.Uuid(), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('evidence_ref', sa.String(500), nullable=True),
        sa.Column('performed_by', sa.Uuid(), nullable=True),
        _timestamp('created_at'),
    )
    op.create_index('idx_movements_lot', 'inventory_movements', ['lot_id', 'created_at'])
    op.create_index('idx_movements_reference', 'inventory_movements', ['reference_type', 'reference_id'])

    op.create_table(
        'cycle_counts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('scheduled_date', sa.Date(), nullable=False),
        sa.Column('location', sa.String(50), nullable=True),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('expected_quantity', sa.Integer(), nullable=False),
        sa.Column('counted_quantity', sa.Integer(), nullable=True),
        sa.Column('variance', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('counted_by', sa.Uuid(), nullable=True),
        _timestamp('counted_at', nullable=True),
        sa.Column('adjusted_lot_id', sa.Uuid(), nullable=True),
        _timestamp('created_at'),
    )
    op.create_index('idx_cycle_counts_status_date', 'cycle_counts', ['status', 'scheduled_date'])

    # ==================== reception ====================
    op.create_table(
        'reception_orders',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('order_number', sa.String(30), nullable=False, unique=True),
        sa.Column('supplier_id', sa.Uuid(), sa.ForeignKey('suppliers.id'), nullable=False),
        sa.Column('brand', sa.String(50), nullable=False),
        sa.Column('invoice_ref', sa.String(100), nullable=True),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('received_by', sa.Uuid(), nullable=True),
        _timestamp('received_at', nullable=True),
        sa.Column('validated_by', sa.Uuid(), nullable=True),
        _timestamp('validated_at', nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_index('idx_reception_orders_status', 'reception_orders', ['status'])

    op.create_table(
        'reception_lines',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'reception_order_id', sa.Uuid(),
            sa.ForeignKey('reception_orders.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('line_number', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('expected_quantity', sa.Integer(), nullable=False),
        sa.Column('counted_quantity', sa.Integer(), nullable=True),
        sa.Column('condition', sa.String(50), nullable=False),
        sa.Column('lot_number', sa.String(50), nullable=False),
        sa.Column('expiration_date', sa.Date(), nullable=True),
        sa.Column('counted_by', sa.Uuid(), nullable=True),
        _timestamp('counted_at', nullable=True),
        sa.Column('lot_id', sa.Uuid(), nullable=True),
    )
    op.create_index('ix_reception_lines_reception_order_id', 'reception_lines', ['reception_order_id'])

    op.create_table(
        'reception_discrepancies',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'reception_order_id', sa.Uuid(),
            sa.ForeignKey('reception_orders.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column(
            'reception_line_id', sa.Uuid(),
            sa.ForeignKey('reception_lines.id', ondelete='CASCADE'), nullable=False, unique=True,
        ),
        sa.Column('expected_quantity', sa.Integer(), nullable=False),
        sa.Column('counted_quantity', sa.Integer(), nullable=False),
        sa.Column('difference', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('resolution_notes', sa.Text(), nullable=True),
        sa.Column('resolved_by', sa.Uuid(), nullable=True),
        _timestamp('resolved_at', nullable=True),
        _timestamp('created_at'),
    )
    op.create_index(
        'ix_reception_discrepancies_reception_order_id', 'reception_discrepancies', ['reception_order_id']
    )

    # ==================== orders ====================
    op.create_table(
        'orders',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('order_number', sa.String(30), nullable=False, unique=True),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('total_weight_kg', sa.Numeric(12, 3)),
        sa.Column('total_volume_m3', sa.Numeric(12, 6)),
        sa.Column('total_amount', sa.Numeric(14, 2)),
        sa.Column('suggested_vehicle_type', sa.String(50), nullable=True),
        sa.Column('has_fragile_items', sa.Boolean()),
        sa.Column('has_heavy_items', sa.Boolean()),
        sa.Column('loading_alert', sa.String(500), nullable=True),
        sa.Column('reservation_status', sa.String(50), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_index('idx_orders_status_created', 'orders', ['status', 'created_at'])
    op.create_index('ix_orders_customer_id', 'orders', ['customer_id'])

    op.create_table(
        'order_lines',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('order_id', sa.Uuid(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('line_number', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('lot_id', sa.Uuid(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2)),
        sa.Column('subtotal', sa.Numeric(14, 2)),
        sa.Column('reservation_status', sa.String(50), nullable=False),
    )
    op.create_index('ix_order_lines_order_id', 'order_lines', ['order_id'])

    # ==================== fleet ====================
    op.create_table(
        'vehicles',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('plate_number', sa.String(20), nullable=False, unique=True),
        sa.Column('vehicle_type', sa.String(50), nullable=False),
        sa.Column('make', sa.String(50), nullable=True),
        sa.Column('model', sa.String(50), nullable=True),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('capacity_kg', sa.Numeric(10, 2)),
        sa.Column('capacity_m3', sa.Numeric(10, 2)),
        sa.Column('status', sa.String(50), nullable=False),
        _timestamp('last_maintenance_date', nullable=True),
        _timestamp('next_maintenance_date', nullable=True),
        sa.Column('is_active', sa.Boolean()),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_index('idx_vehicles_status', 'vehicles', ['status', 'is_active'])

    op.create_table(
        'drivers',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('license_number', sa.String(50), nullable=False, unique=True),
        sa.Column('license_expiry', sa.Date(), nullable=False),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('is_active', sa.Boolean()),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )

    op.create_table(
        'routes',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('route_number', sa.String(30), nullable=False, unique=True),
        sa.Column('order_id', sa.Uuid(), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('vehicle_id', sa.Uuid(), sa.ForeignKey('vehicles.id'), nullable=False),
        sa.Column('driver_id', sa.Uuid(), sa.ForeignKey('drivers.id'), nullable=False),
        sa.Column('route_type', sa.String(50), nullable=False),
        _timestamp('departure_date', nullable=True),
        _timestamp('estimated_arrival', nullable=True),
        _timestamp('actual_arrival', nullable=True),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('invoice_ref', sa.String(500), nullable=True),
        sa.Column('assigned_by', sa.Uuid(), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_index('ix_routes_order_id', 'routes', ['order_id'])

    op.create_table(
        'vehicle_maintenance',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('vehicle_id', sa.Uuid(), sa.ForeignKey('vehicles.id'), nullable=False),
        sa.Column('maintenance_type', sa.String(50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('cost', sa.Numeric(12, 2)),
        _timestamp('start_date'),
        _timestamp('end_date', nullable=True),
        sa.Column('performed_by', sa.String(200), nullable=True),
        _timestamp('created_at'),
    )
    op.create_index('ix_vehicle_maintenance_vehicle_id', 'vehicle_maintenance', ['vehicle_id'])

    op.create_table(
        'pre_departure_checklists',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('route_id', sa.Uuid(), sa.ForeignKey('routes.id'), nullable=False),
        sa.Column('driver_id', sa.Uuid(), nullable=False),
        sa.Column('tire_condition', sa.String(50), nullable=False),
        sa.Column('fuel_level', sa.Integer(), nullable=False),
        sa.Column('oil_level', sa.String(50), nullable=False),
        sa.Column('lights_ok', sa.Boolean(), nullable=False),
        sa.Column('damage_evidence_ref', sa.String(500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('checked_by', sa.Uuid(), nullable=True),
        _timestamp('checked_at'),
    )
    op.create_index('ix_pre_departure_checklists_route_id', 'pre_departure_checklists', ['route_id'])

    # ==================== support ====================
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=True),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        _timestamp('created_at'),
    )
    op.create_index('ix_audit_logs_user_id', 'audit_logs', ['user_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_logs_entity_type', 'audit_logs', ['entity_type'])
    op.create_index('ix_audit_logs_created_at', 'audit_logs', ['created_at'])

    op.create_table(
        'document_sequences',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('prefix', sa.String(10), nullable=False),
        sa.Column('date_key', sa.String(8), nullable=False),
        sa.Column('current_number', sa.Integer(), nullable=False),
        sa.Column('padding_length', sa.Integer(), nullable=False),
        _timestamp('created_at'),
        sa.UniqueConstraint('prefix', 'date_key', name='uq_document_prefix_date'),
    )
    op.create_index('ix_document_sequences_prefix', 'document_sequences', ['prefix'])


def downgrade() -> None:
    for table in (
        'document_sequences',
        'audit_logs',
        'pre_departure_checklists',
        'vehicle_maintenance',
        'routes',
        'drivers',
        'vehicles',
        'order_lines',
        'orders',
        'reception_discrepancies',
        'reception_lines',
        'reception_orders',
        'cycle_counts',
        'inventory_movements',
        'lots',
        'customers',
        'suppliers',
        'products',
    ):
        op.drop_table(table)
