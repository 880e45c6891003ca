"""booking core schema

Revision ID: 3c1d9a7b52e4
Revises:
Create Date: 2025-12-01 09:12:44.418203

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = '3c1d9a7b52e4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "dining_tables",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("location", sa.String(100), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.CheckConstraint("capacity > 0", name="ck_dining_tables_capacity_positive"),
    )
    op.create_table(
        "menu_items",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("availability", sa.Boolean(), nullable=False),
    )
    op.create_table(
        "reservations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("customer_id", sa.String(36), nullable=False),
        sa.Column("table_id", sa.String(36), sa.ForeignKey("dining_tables.id"), nullable=False),
        sa.Column("reservation_date", sa.DateTime(), nullable=False),
        sa.Column("reservation_time", sa.String(5), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("number_of_guests", sa.Integer(), nullable=False),
        sa.Column("booking_status", sa.String(16), nullable=False),
        sa.Column("special_requests", sa.Text(), nullable=True),
        sa.Column("assigned_staff_id", sa.String(36), nullable=True),
        sa.Column("order_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("duration BETWEEN 30 AND 480", name="ck_reservations_duration_range"),
        sa.CheckConstraint("number_of_guests > 0", name="ck_reservations_guests_positive"),
    )
    op.create_index("ix_reservations_customer_id", "reservations", ["customer_id"])
    op.create_index(
        "ix_reservations_table_day_status",
        "reservations",
        ["table_id", "reservation_date", "booking_status"],
    )
    op.create_table(
        "orders",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("customer_id", sa.String(36), nullable=False),
        sa.Column("staff_id", sa.String(36), nullable=True),
        sa.Column("order_type", sa.String(16), nullable=False),
        sa.Column(
            "reservation_id",
            sa.String(36),
            sa.ForeignKey("reservations.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("table_id", sa.String(36), sa.ForeignKey("dining_tables.id"), nullable=True),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_type", sa.String(16), nullable=True),
        sa.Column("payment_id", sa.String(36), nullable=True),
        sa.Column("delivery_address", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_orders_customer_id", "orders", ["customer_id"])
    op.create_table(
        "order_items",
        sa.Column(
            "order_id",
            sa.String(36),
            sa.ForeignKey("orders.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("position", sa.Integer(), primary_key=True),
        sa.Column("menu_item_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("sub_total", sa.Numeric(10, 2), nullable=False),
        sa.Column("special_instructions", sa.Text(), nullable=True),
        sa.CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
    )


def downgrade() -> None:
    op.drop_table("order_items")
    op.drop_index("ix_orders_customer_id", table_name="orders")
    op.drop_table("orders")
    op.drop_index("ix_reservations_table_day_status", table_name="reservations")
    op.drop_index("ix_reservations_customer_id", table_name="reservations")
    op.drop_table("reservations")
    op.drop_table("menu_items")
    op.drop_table("dining_tables")
