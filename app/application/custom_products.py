import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, Field

from app.domain.models import CustomProduct, CustomProductStatus, Placement
from app.domain.exceptions import CustomProductNotFoundError, AccessDeniedError

logger = logging.getLogger(__name__)


class CreateCustomProductDTO(BaseModel):
    user_id: str
    supplier_product_id: int
    variant_ids: List[int] = Field(min_length=1)
    placement: str = "front"
    design_url: str
    position: Optional[Placement] = None


class CreateCustomProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, dto: CreateCustomProductDTO) -> CustomProduct:
        now = datetime.now(timezone.utc)
        product = CustomProduct(
            id=uuid.uuid4().hex,
            user_id=dto.user_id,
            supplier_product_id=dto.supplier_product_id,
            variant_ids=dto.variant_ids,
            placement=dto.placement,
            design_url=dto.design_url,
            position=dto.position,
            status=CustomProductStatus.DRAFT,
            created_at=now,
            updated_at=now
        )
        async with self._uow() as uow:
            await uow.custom_products.create(product)
            await uow.commit()
        logger.info(f"Создан товар пользователя {product.id} для {dto.user_id}")
        return product


class UpdateCustomProductDTO(BaseModel):
    variant_ids: Optional[List[int]] = Field(default=None, min_length=1)
    placement: Optional[str] = None
    design_url: Optional[str] = None
    position: Optional[Placement] = None


async def _get_owned(uow, user_id: str, product_id: str) -> CustomProduct:
    product = await uow.custom_products.get_by_id(product_id)
    if not product:
        raise CustomProductNotFoundError(f"Товар {product_id} не найден")
    if product.user_id != user_id:
        raise AccessDeniedError(f"Нет доступа к товару {product_id}")
    return product


class GetCustomProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: str, product_id: str) -> CustomProduct:
        async with self._uow() as uow:
            return await _get_owned(uow, user_id, product_id)


class ListCustomProductsUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: str) -> List[CustomProduct]:
        async with self._uow() as uow:
            return await uow.custom_products.list_by_user(user_id)


class UpdateCustomProductUseCase:
    """Частичное обновление. Смена дизайна или размещения сбрасывает мокапы в draft"""

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: str, product_id: str, dto: UpdateCustomProductDTO) -> CustomProduct:
        changes = dto.model_dump(exclude_unset=True)
        async with self._uow() as uow:
            product = await _get_owned(uow, user_id, product_id)
            updated = product.model_copy(update={
                "variant_ids": changes.get("variant_ids", product.variant_ids),
                "placement": changes.get("placement", product.placement),
                "design_url": changes.get("design_url", product.design_url),
                "position": dto.position if "position" in changes else product.position,
                "updated_at": datetime.now(timezone.utc),
            })
            if updated.design_url != product.design_url or updated.placement != product.placement:
                updated = updated.model_copy(update={"mockup_urls": [], "status": CustomProductStatus.DRAFT})
            await uow.custom_products.update(updated)
            await uow.commit()
        logger.info(f"Товар пользователя {product_id} обновлен: {sorted(changes)}")
        return updated


class DeleteCustomProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: str, product_id: str) -> None:
        async with self._uow() as uow:
            await _get_owned(uow, user_id, product_id)
            await uow.custom_products.delete(product_id)
            await uow.commit()
        logger.info(f"Товар пользователя {product_id} удален")
