"""orders and custom products

Revision ID: 0001
Revises:
Create Date: 2026-10-19 12:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

order_status = sa.Enum("PENDING", "PROCESSING", "SHIPPED", "DELIVERED", "CANCELLED", "FAILED", name="orderstatus")
payment_status = sa.Enum("UNPAID", "PAID", "REFUNDED", "FAILED", name="paymentstatus")
custom_product_status = sa.Enum("DRAFT", "READY", name="customproductstatus")


def upgrade() -> None:
    op.create_table(
        "orders",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("recipient", sa.JSON(), nullable=False),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("shipping_method", sa.String(), nullable=True),
        sa.Column("shipping_cost", sa.Numeric(10, 2), nullable=False),
        sa.Column("tax_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(10, 2), nullable=False),
        sa.Column("total", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", order_status, nullable=True),
        sa.Column("payment_status", payment_status, nullable=True),
        sa.Column("payment_intent_id", sa.String(), nullable=False),
        sa.Column("supplier_order_id", sa.BigInteger(), nullable=True),
        sa.Column("supplier_response", sa.JSON(), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_orders_user_id", "orders", ["user_id"])
    op.create_index("ix_orders_payment_intent_id", "orders", ["payment_intent_id"])
    op.create_index("ix_orders_supplier_order_id", "orders", ["supplier_order_id"])
    op.create_index("ix_orders_user_created", "orders", ["user_id", "created_at"])

    op.create_table(
        "custom_products",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("supplier_product_id", sa.Integer(), nullable=False),
        sa.Column("variant_ids", sa.JSON(), nullable=False),
        sa.Column("placement", sa.String(), nullable=False),
        sa.Column("design_url", sa.String(), nullable=False),
        sa.Column("position", sa.JSON(), nullable=True),
        sa.Column("mockup_urls", sa.JSON(), nullable=False),
        sa.Column("status", custom_product_status, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_custom_products_user_id", "custom_products", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_custom_products_user_id", table_name="custom_products")
    op.drop_table("custom_products")
    op.drop_index("ix_orders_user_created", table_name="orders")
    op.drop_index("ix_orders_supplier_order_id", table_name="orders")
    op.drop_index("ix_orders_payment_intent_id", table_name="orders")
    op.drop_index("ix_orders_user_id", table_name="orders")
    op.drop_table("orders")
    custom_product_status.drop(op.get_bind(), checkfirst=True)
    payment_status.drop(op.get_bind(), checkfirst=True)
    order_status.drop(op.get_bind(), checkfirst=True)
