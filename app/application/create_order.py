import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
from pydantic import BaseModel

from app.domain.models import Order, OrderItem, OrderStatus, PaymentStatus, Recipient
from app.domain.exceptions import InvalidOrderError, PaymentNotConfirmedError
from app.application.interfaces import PaymentsService
from app.application.fulfill_order import FulfillOrderUseCase
from app.infrastructure.background import BackgroundTaskRunner


logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class CreateOrderDTO(BaseModel):
    user_id: str
    recipient: Recipient
    items: List[OrderItem]
    shipping_method: Optional[str] = None
    shipping_cost: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    payment_intent_id: str


def calculate_totals(items: List[OrderItem], shipping_cost: Decimal, tax_amount: Decimal) -> tuple[Decimal, Decimal]:
    subtotal = sum((item.price * item.quantity for item in items), Decimal("0"))
    subtotal = subtotal.quantize(CENT, rounding=ROUND_HALF_UP)
    total = (subtotal + shipping_cost + tax_amount).quantize(CENT, rounding=ROUND_HALF_UP)
    return subtotal, total


class CreateOrderUseCase:
    def __init__(
        self,
        unit_of_work,
        payments_service: PaymentsService,
        fulfill_order: FulfillOrderUseCase,
        background: BackgroundTaskRunner
    ):
        self._uow = unit_of_work
        self._payments = payments_service
        self._fulfill_order = fulfill_order
        self._background = background

    async def __call__(self, order_data: CreateOrderDTO) -> Order:
        logger.info(f"Создание заказа для пользователя {order_data.user_id}, payment intent {order_data.payment_intent_id}")

        # 1. Валидация до любых побочных эффектов
        self._validate(order_data)

        # 2. Проверка оплаты
        if not await self._payments.confirm_payment(order_data.payment_intent_id):
            raise PaymentNotConfirmedError(
                f"Платеж {order_data.payment_intent_id} не подтвержден. Завершите оплату перед созданием заказа"
            )

        # 3. Расчет суммы
        subtotal, total = calculate_totals(order_data.items, order_data.shipping_cost, order_data.tax_amount)

        # 4. Создание заказа
        now = datetime.now(timezone.utc)
        order = Order(
            id=uuid.uuid4().hex,
            user_id=order_data.user_id,
            recipient=order_data.recipient,
            items=order_data.items,
            shipping_method=order_data.shipping_method,
            shipping_cost=order_data.shipping_cost,
            tax_amount=order_data.tax_amount,
            subtotal=subtotal,
            total=total,
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PAID,
            payment_intent_id=order_data.payment_intent_id,
            paid_at=now,
            created_at=now,
            updated_at=now
        )
        async with self._uow() as uow:
            await uow.orders.create(order)
            await uow.commit()
        logger.info(f"Заказ создан: {order.id}, сумма {order.total}")

        # 5. Отправка поставщику в фоне, клиент не ждет
        order_id = order.id
        self._background.spawn(lambda: self._fulfill_order(order_id), name=f"fulfill-order-{order_id}")

        return order

    @staticmethod
    def _validate(order_data: CreateOrderDTO) -> None:
        if not order_data.items:
            raise InvalidOrderError("Заказ должен содержать хотя бы один товар")
        bad_quantity = [item.variant_id for item in order_data.items if item.quantity < 1]
        if bad_quantity:
            raise InvalidOrderError(f"Количество должно быть >= 1 для вариантов: {bad_quantity}")
        bad_price = [item.variant_id for item in order_data.items if item.price < 0]
        if bad_price:
            raise InvalidOrderError(f"Цена не может быть отрицательной для вариантов: {bad_price}")
        if order_data.shipping_cost < 0:
            raise InvalidOrderError(f"Стоимость доставки не может быть отрицательной: {order_data.shipping_cost}")
        if order_data.tax_amount < 0:
            raise InvalidOrderError(f"Налог не может быть отрицательным: {order_data.tax_amount}")
