import asyncio
import logging
from decimal import Decimal

from app.domain.models import Order, OrderStatus, PaymentStatus
from app.application.interfaces import SupplierService, PaymentsService, StorageService
from app.application.design_files import is_data_url, decode_data_url

logger = logging.getLogger(__name__)


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


def build_supplier_payload(order: Order) -> dict:
    """Заказ → тело запроса POST /orders поставщика"""
    items = []
    for item in order.items:
        supplier_item = {
            "variant_id": item.variant_id,
            "quantity": item.quantity,
            "retail_price": _money(item.price),
        }
        if item.design_url:
            supplier_item["files"] = [{"url": item.design_url}]
        items.append(supplier_item)

    payload = {
        # external_id защищает от дублей при повторной отправке
        "external_id": order.id,
        "recipient": order.recipient.model_dump(exclude_none=True),
        "items": items,
        "retail_costs": {
            "shipping": _money(order.shipping_cost),
            "tax": _money(order.tax_amount),
        },
    }
    if order.shipping_method:
        payload["shipping"] = order.shipping_method
    return payload


class FulfillOrderUseCase:
    """Фоновая часть заказа: отправка поставщику, при ошибке failed и возврат платежа.

    Каждый выход записывает конечный статус заказа; исключения наружу не выходят.
    """

    def __init__(
        self,
        unit_of_work,
        supplier: SupplierService,
        payments: PaymentsService,
        storage: StorageService,
        timeout: float = 120.0
    ):
        self._uow = unit_of_work
        self._supplier = supplier
        self._payments = payments
        self._storage = storage
        self._timeout = timeout

    async def __call__(self, order_id: str) -> None:
        try:
            async with self._uow() as uow:
                order = await uow.orders.get_by_id(order_id)
        except Exception as e:
            logger.error(f"Не удалось загрузить заказ {order_id} для отправки поставщику: {e}", exc_info=True)
            return

        if not order:
            logger.error(f"Заказ {order_id} не найден для отправки поставщику")
            return
        if not order.can_be_processed():
            logger.warning(
                f"Заказ {order_id} не может быть отправлен "
                f"(status: {order.status}, payment: {order.payment_status})"
            )
            return

        try:
            order = await self._publish_designs(order)
        except Exception as e:
            logger.error(f"Не удалось загрузить дизайны заказа {order_id}: {e}")
            await self.compensate(order_id)
            return

        try:
            supplier_order = await asyncio.wait_for(
                self._supplier.create_order(build_supplier_payload(order)),
                timeout=self._timeout
            )
        except asyncio.TimeoutError:
            logger.error(f"Отправка заказа {order_id} поставщику не завершилась за {self._timeout}s")
            await self.compensate(order_id)
            return
        except Exception as e:
            logger.error(f"Ошибка отправки заказа {order_id} поставщику: {e}")
            await self.compensate(order_id)
            return

        try:
            async with self._uow() as uow:
                await uow.orders.mark_processing(order_id, supplier_order.id, supplier_order.raw)
                await uow.commit()
        except Exception as e:
            # Заказ у поставщика уже создан, возврат делать нельзя
            logger.critical(
                f"Заказ {order_id} создан у поставщика ({supplier_order.id}), "
                f"но статус не сохранен: {e}. Требуется ручная проверка"
            )
            return

        logger.info(f"Заказ {order_id} отмечен PROCESSING, supplier order {supplier_order.id}")

    async def _publish_designs(self, order: Order) -> Order:
        """Поставщик не читает data URL: такие дизайны загружаются в хранилище"""
        uploaded = {}
        items = []
        for item in order.items:
            if item.design_url and is_data_url(item.design_url):
                if item.design_url not in uploaded:
                    mime_type, data = decode_data_url(item.design_url)
                    uploaded[item.design_url] = await self._storage.upload_buffer(data, mime_type, folder="orders")
                item = item.model_copy(update={"design_url": uploaded[item.design_url]})
            items.append(item)
        if uploaded:
            logger.info(f"Заказ {order.id}: загружено {len(uploaded)} дизайнов из data URL")
        return order.model_copy(update={"items": items})

    async def compensate(self, order_id: str) -> None:
        """Отмечает оплаченный заказ failed и возвращает платеж. Повторный вызов не делает второй возврат."""
        try:
            async with self._uow() as uow:
                order = await uow.orders.get_by_id(order_id)
        except Exception as e:
            logger.critical(f"Не удалось загрузить заказ {order_id} для возврата платежа: {e}", exc_info=True)
            return

        if not order:
            logger.error(f"Заказ {order_id} не найден для возврата платежа")
            return
        if order.payment_status != PaymentStatus.REFUNDED and not order.can_be_refunded():
            # Неоплаченный заказ не может покинуть pending
            logger.warning(
                f"Заказ {order_id} не оплачен (payment: {order.payment_status}), статус и платеж не меняем"
            )
            return

        if order.status != OrderStatus.FAILED:
            try:
                async with self._uow() as uow:
                    await uow.orders.update_status(order_id, OrderStatus.FAILED)
                    await uow.commit()
            except Exception as e:
                logger.critical(f"Не удалось отметить заказ {order_id} как FAILED: {e}", exc_info=True)
                return
            logger.info(f"Заказ {order_id} отмечен FAILED")

        if order.payment_status == PaymentStatus.REFUNDED:
            logger.info(f"Платеж по заказу {order_id} уже возвращен")
            return

        try:
            refund = await self._payments.refund_payment(order.payment_intent_id, order.total)
        except Exception as e:
            logger.error(
                f"Не удалось вернуть платеж: order {order_id}, payment intent {order.payment_intent_id}, "
                f"сумма {order.total}: {e}. Требуется ручной возврат"
            )
            return

        try:
            async with self._uow() as uow:
                await uow.orders.update_payment_status(order_id, PaymentStatus.REFUNDED)
                await uow.commit()
        except Exception as e:
            logger.critical(
                f"Возврат {refund.id} по заказу {order_id} выполнен, но статус платежа не сохранен: {e}"
            )
            return

        logger.info(f"Возврат {refund.id} выполнен для заказа {order_id}")
