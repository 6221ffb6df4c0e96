from sqlalchemy import Table, Column, String, Integer, BigInteger, Numeric, Enum, DateTime, JSON, MetaData, Index
from sqlalchemy.sql import func

from app.domain.models import OrderStatus, PaymentStatus, CustomProductStatus

metadata = MetaData()


orders_tbl = Table(
    "orders",
    metadata,
    Column("id", String, primary_key=True),
    Column("user_id", String, nullable=False, index=True),
    Column("recipient", JSON, nullable=False),
    Column("items", JSON, nullable=False),
    Column("shipping_method", String, nullable=True),
    Column("shipping_cost", Numeric(10, 2), nullable=False, default=0),
    Column("tax_amount", Numeric(10, 2), nullable=False, default=0),
    Column("subtotal", Numeric(10, 2), nullable=False),
    Column("total", Numeric(10, 2), nullable=False),
    Column("status", Enum(OrderStatus), default=OrderStatus.PENDING),
    Column("payment_status", Enum(PaymentStatus), default=PaymentStatus.UNPAID),
    Column("payment_intent_id", String, nullable=False, index=True),
    Column("supplier_order_id", BigInteger, nullable=True, index=True),
    Column("supplier_response", JSON, nullable=True),
    Column("paid_at", DateTime(timezone=True), nullable=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now()),
    Index("ix_orders_user_created", "user_id", "created_at"),
)


custom_products_tbl = Table(
    "custom_products",
    metadata,
    Column("id", String, primary_key=True),
    Column("user_id", String, nullable=False, index=True),
    Column("supplier_product_id", Integer, nullable=False),
    Column("variant_ids", JSON, nullable=False),
    Column("placement", String, nullable=False, default="front"),
    Column("design_url", String, nullable=False),
    Column("position", JSON, nullable=True),
    Column("mockup_urls", JSON, nullable=False, default=list),
    Column("status", Enum(CustomProductStatus), default=CustomProductStatus.DRAFT),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
)
