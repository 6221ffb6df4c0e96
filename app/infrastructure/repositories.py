from typing import Optional, List
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import select, insert, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models import (
    Order, OrderStatus, PaymentStatus, OrderItem, Recipient,
    CustomProduct, CustomProductStatus, Placement
)
from app.infrastructure.db_schema import orders_tbl, custom_products_tbl
from app.application.interfaces import OrderRepository, CustomProductRepository


class SQLAlchemyOrderRepository(OrderRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        result = await self._session.execute(
            select(orders_tbl).where(orders_tbl.c.id == order_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def list_by_user(self, user_id: str) -> List[Order]:
        result = await self._session.execute(
            select(orders_tbl)
            .where(orders_tbl.c.user_id == user_id)
            .order_by(orders_tbl.c.created_at.desc())
        )
        return [self._to_domain(row) for row in result.fetchall()]

    async def create(self, order: Order) -> None:
        stmt = insert(orders_tbl).values(
            id=order.id,
            user_id=order.user_id,
            recipient=order.recipient.model_dump(),
            items=[item.model_dump(mode="json") for item in order.items],
            shipping_method=order.shipping_method,
            shipping_cost=order.shipping_cost,
            tax_amount=order.tax_amount,
            subtotal=order.subtotal,
            total=order.total,
            status=order.status,
            payment_status=order.payment_status,
            payment_intent_id=order.payment_intent_id,
            supplier_order_id=order.supplier_order_id,
            supplier_response=order.supplier_response,
            paid_at=order.paid_at,
            created_at=order.created_at,
            updated_at=order.updated_at
        )
        await self._session.execute(stmt)

    async def update_status(self, order_id: str, status: OrderStatus) -> None:
        stmt = (
            update(orders_tbl)
            .where(orders_tbl.c.id == order_id)
            .values(
                status=status,
                updated_at=datetime.now(timezone.utc)
            )
        )
        await self._session.execute(stmt)

    async def mark_processing(self, order_id: str, supplier_order_id: int, supplier_response: dict) -> None:
        stmt = (
            update(orders_tbl)
            .where(orders_tbl.c.id == order_id)
            .values(
                status=OrderStatus.PROCESSING,
                supplier_order_id=supplier_order_id,
                supplier_response=supplier_response,
                updated_at=datetime.now(timezone.utc)
            )
        )
        await self._session.execute(stmt)

    async def update_payment_status(self, order_id: str, payment_status: PaymentStatus) -> None:
        stmt = (
            update(orders_tbl)
            .where(orders_tbl.c.id == order_id)
            .values(
                payment_status=payment_status,
                updated_at=datetime.now(timezone.utc)
            )
        )
        await self._session.execute(stmt)

    def _to_domain(self, row) -> Order:
        """Трансформация DB → Domain"""
        return Order(
            id=row.id,
            user_id=row.user_id,
            recipient=Recipient(**row.recipient),
            items=[OrderItem(**item) for item in row.items],
            shipping_method=row.shipping_method,
            shipping_cost=Decimal(row.shipping_cost),
            tax_amount=Decimal(row.tax_amount),
            subtotal=Decimal(row.subtotal),
            total=Decimal(row.total),
            status=OrderStatus(row.status),
            payment_status=PaymentStatus(row.payment_status),
            payment_intent_id=row.payment_intent_id,
            supplier_order_id=row.supplier_order_id,
            supplier_response=row.supplier_response,
            paid_at=row.paid_at,
            created_at=row.created_at,
            updated_at=row.updated_at
        )


class SQLAlchemyCustomProductRepository(CustomProductRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, product_id: str) -> Optional[CustomProduct]:
        result = await self._session.execute(
            select(custom_products_tbl).where(custom_products_tbl.c.id == product_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def list_by_user(self, user_id: str) -> List[CustomProduct]:
        result = await self._session.execute(
            select(custom_products_tbl)
            .where(custom_products_tbl.c.user_id == user_id)
            .order_by(custom_products_tbl.c.created_at.desc())
        )
        return [self._to_domain(row) for row in result.fetchall()]

    async def create(self, product: CustomProduct) -> None:
        stmt = insert(custom_products_tbl).values(
            id=product.id,
            user_id=product.user_id,
            supplier_product_id=product.supplier_product_id,
            variant_ids=product.variant_ids,
            placement=product.placement,
            design_url=product.design_url,
            position=product.position.model_dump() if product.position else None,
            mockup_urls=product.mockup_urls,
            status=product.status,
            created_at=product.created_at,
            updated_at=product.updated_at
        )
        await self._session.execute(stmt)

    async def update(self, product: CustomProduct) -> None:
        stmt = (
            update(custom_products_tbl)
            .where(custom_products_tbl.c.id == product.id)
            .values(
                variant_ids=product.variant_ids,
                placement=product.placement,
                design_url=product.design_url,
                position=product.position.model_dump() if product.position else None,
                mockup_urls=product.mockup_urls,
                status=product.status,
                updated_at=datetime.now(timezone.utc)
            )
        )
        await self._session.execute(stmt)

    async def delete(self, product_id: str) -> None:
        await self._session.execute(
            delete(custom_products_tbl).where(custom_products_tbl.c.id == product_id)
        )

    async def update_mockups(self, product_id: str, mockup_urls: List[str], position: Optional[Placement]) -> None:
        values = {
            "mockup_urls": mockup_urls,
            "status": CustomProductStatus.READY,
            "updated_at": datetime.now(timezone.utc),
        }
        if position is not None:
            values["position"] = position.model_dump()
        stmt = (
            update(custom_products_tbl)
            .where(custom_products_tbl.c.id == product_id)
            .values(**values)
        )
        await self._session.execute(stmt)

    def _to_domain(self, row) -> CustomProduct:
        return CustomProduct(
            id=row.id,
            user_id=row.user_id,
            supplier_product_id=row.supplier_product_id,
            variant_ids=row.variant_ids,
            placement=row.placement,
            design_url=row.design_url,
            position=Placement(**row.position) if row.position else None,
            mockup_urls=row.mockup_urls or [],
            status=CustomProductStatus(row.status),
            created_at=row.created_at,
            updated_at=row.updated_at
        )
