from typing import List

from app.domain.models import Order
from app.domain.exceptions import OrderNotFoundError, AccessDeniedError


class GetOrderUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: str, order_id: str) -> Order:
        async with self._uow() as uow:
            order = await uow.orders.get_by_id(order_id)
            if not order:
                raise OrderNotFoundError(f"Заказ {order_id} не найден")
            if order.user_id != user_id:
                raise AccessDeniedError(f"Нет доступа к заказу {order_id}")
            return order


class ListUserOrdersUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: str) -> List[Order]:
        async with self._uow() as uow:
            return await uow.orders.list_by_user(user_id)
