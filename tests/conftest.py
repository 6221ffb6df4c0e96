"""
Общие фикстуры: фейковые внешние сервисы, тестовые данные и in-memory БД на aiosqlite.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import List

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.domain.models import (
    CustomProduct, Order, OrderItem, OrderStatus, PaymentStatus, Recipient
)
from app.infrastructure.db_schema import metadata
from app.infrastructure.unit_of_work import UnitOfWork

from fakes import FakeSupplier, FakePayments, FakeStorage, FakeProber


@pytest.fixture
def supplier() -> FakeSupplier:
    return FakeSupplier()


@pytest.fixture
def payments() -> FakePayments:
    return FakePayments()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def prober() -> FakeProber:
    return FakeProber()


@pytest.fixture
def recipient() -> Recipient:
    return Recipient(
        name="Jane Doe",
        address1="19749 Dearborn St",
        city="Chatsworth",
        state_code="CA",
        country_code="US",
        zip="91311",
        email="jane@example.com",
    )


@pytest.fixture
def order_items() -> List[OrderItem]:
    return [
        OrderItem(variant_id=4011, quantity=2, price=Decimal("10.00")),
        OrderItem(variant_id=4012, quantity=1, price=Decimal("5.50"), design_url="https://cdn.example.com/d.png"),
    ]


@pytest.fixture
def make_order(recipient, order_items):
    def _make(**overrides) -> Order:
        now = datetime.now(timezone.utc)
        data = dict(
            id="order1",
            user_id="user-1",
            recipient=recipient,
            items=order_items,
            shipping_method="STANDARD",
            shipping_cost=Decimal("4.99"),
            tax_amount=Decimal("2.10"),
            subtotal=Decimal("25.50"),
            total=Decimal("32.59"),
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PAID,
            payment_intent_id="pi_123",
            paid_at=now,
            created_at=now,
            updated_at=now,
        )
        data.update(overrides)
        return Order(**data)
    return _make


@pytest.fixture
def make_custom_product():
    def _make(**overrides) -> CustomProduct:
        now = datetime.now(timezone.utc)
        data = dict(
            id="cp1",
            user_id="user-1",
            supplier_product_id=71,
            variant_ids=[4011],
            design_url="https://cdn.example.com/d.png",
            created_at=now,
            updated_at=now,
        )
        data.update(overrides)
        return CustomProduct(**data)
    return _make


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def uow(session_factory) -> UnitOfWork:
    return UnitOfWork(session_factory)
