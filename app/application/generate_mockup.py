import logging
from typing import List, Optional
from pydantic import BaseModel, Field

from app.domain.models import MockupFile
from app.domain.exceptions import InvalidVariantError, CustomProductNotFoundError, AccessDeniedError
from app.application.interfaces import SupplierService, ImageProber
from app.application.calculate_position import CalculatePositionUseCase, CalculatePositionDTO
from app.application.submit_mockup import SubmitMockupJobUseCase, SubmitMockupDTO
from app.application.await_mockup import AwaitMockupCompletionUseCase

logger = logging.getLogger(__name__)


class GenerateMockupDTO(BaseModel):
    product_id: int
    image_url: str
    placement: str = "front"
    variant_ids: Optional[List[int]] = None
    max_variants: int = Field(default=3, ge=1)
    user_id: Optional[str] = None
    custom_product_id: Optional[str] = None


class GenerateMockupResult(BaseModel):
    job_key: str
    variant_ids: List[int]
    mockup_urls: List[str]


class GenerateMockupUseCase:
    """Упрощенный сценарий: выбор вариантов → размеры → позиция → задача → ожидание"""

    def __init__(
        self,
        unit_of_work,
        supplier: SupplierService,
        image_prober: ImageProber,
        calculate_position: CalculatePositionUseCase,
        submit_mockup: SubmitMockupJobUseCase,
        await_mockup: AwaitMockupCompletionUseCase
    ):
        self._uow = unit_of_work
        self._supplier = supplier
        self._prober = image_prober
        self._calculate_position = calculate_position
        self._submit_mockup = submit_mockup
        self._await_mockup = await_mockup

    async def __call__(self, dto: GenerateMockupDTO) -> GenerateMockupResult:
        logger.info(f"Генерация мокапа для товара {dto.product_id}")

        if dto.custom_product_id:
            await self._check_custom_product(dto.custom_product_id, dto.user_id)

        variant_ids = await self._select_variants(dto)

        # Без автоподбора позиции: ошибка чтения изображения здесь должна дойти до клиента
        dimensions = await self._prober.probe_dimensions(dto.image_url)
        position = await self._calculate_position(CalculatePositionDTO(
            product_id=dto.product_id,
            placement=dto.placement,
            image_width=dimensions.width,
            image_height=dimensions.height
        ))

        job_key = await self._submit_mockup(SubmitMockupDTO(
            product_id=dto.product_id,
            variant_ids=variant_ids,
            files=[MockupFile(placement=dto.placement, image_url=dto.image_url, position=position.position)]
        ))
        mockup_urls = await self._await_mockup(job_key)

        if dto.custom_product_id:
            async with self._uow() as uow:
                await uow.custom_products.update_mockups(dto.custom_product_id, mockup_urls, position.position)
                await uow.commit()
            logger.info(f"Товар {dto.custom_product_id} обновлен: {len(mockup_urls)} мокапов")

        return GenerateMockupResult(job_key=job_key, variant_ids=variant_ids, mockup_urls=mockup_urls)

    async def _select_variants(self, dto: GenerateMockupDTO) -> List[int]:
        if dto.variant_ids:
            logger.info(f"Используем переданные варианты: {dto.variant_ids}")
            return dto.variant_ids

        product = await self._supplier.get_product(dto.product_id)
        in_stock = [v.id for v in product.variants if v.in_stock is not False][:dto.max_variants]
        if not in_stock:
            raise InvalidVariantError(
                dto.product_id, [], [v.id for v in product.variants],
                message=f"У товара {dto.product_id} нет вариантов в наличии"
            )
        logger.info(f"Автоматически выбрано {len(in_stock)} вариантов: {in_stock}")
        return in_stock

    async def _check_custom_product(self, product_id: str, user_id: Optional[str]) -> None:
        async with self._uow() as uow:
            product = await uow.custom_products.get_by_id(product_id)
        if not product:
            raise CustomProductNotFoundError(f"Товар {product_id} не найден")
        if user_id is not None and product.user_id != user_id:
            raise AccessDeniedError(f"Нет доступа к товару {product_id}")
