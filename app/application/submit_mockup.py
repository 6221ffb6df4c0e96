import logging
from typing import List
from pydantic import BaseModel, Field

from app.domain.models import MockupFile, Placement, DEFAULT_PLACEMENT
from app.domain.exceptions import (
    DomainException, InvalidVariantError, MockupSubmissionError, SupplierServiceError
)
from app.application.interfaces import SupplierService, StorageService, ImageProber
from app.application.calculate_position import CalculatePositionUseCase, CalculatePositionDTO
from app.application.design_files import is_data_url, decode_data_url

logger = logging.getLogger(__name__)

_LOCAL_PREFIXES = ("http://localhost", "http://127.0.0.1", "https://localhost", "https://127.0.0.1")


class SubmitMockupDTO(BaseModel):
    product_id: int
    variant_ids: List[int] = Field(min_length=1)
    files: List[MockupFile] = Field(min_length=1)


class SubmitMockupJobUseCase:
    def __init__(
        self,
        supplier: SupplierService,
        storage: StorageService,
        image_prober: ImageProber,
        calculate_position: CalculatePositionUseCase
    ):
        self._supplier = supplier
        self._storage = storage
        self._prober = image_prober
        self._calculate_position = calculate_position

    async def __call__(self, dto: SubmitMockupDTO) -> str:
        logger.info(f"Генерация мокапа для товара {dto.product_id}, варианты: {dto.variant_ids}")

        await self._validate_variants(dto.product_id, dto.variant_ids)

        files = [await self._prepare_file(dto.product_id, f) for f in dto.files]

        try:
            job_key = await self._supplier.create_mockup_job(dto.product_id, dto.variant_ids, files)
        except SupplierServiceError as e:
            logger.error(f"Не удалось создать задачу мокапа: {e}")
            raise MockupSubmissionError(f"Не удалось создать задачу мокапа: {str(e)}") from e

        logger.info(f"Задача мокапа создана: {job_key}")
        return job_key

    async def _validate_variants(self, product_id: int, variant_ids: List[int]) -> None:
        try:
            product = await self._supplier.get_product(product_id)
        except SupplierServiceError as e:
            # Каталог недоступен, не блокируем генерацию
            logger.warning(f"Не удалось проверить варианты товара {product_id}: {e}")
            return

        valid_ids = [v.id for v in product.variants]
        invalid_ids = [vid for vid in variant_ids if vid not in valid_ids]
        if invalid_ids:
            logger.error(f"Неверные варианты для товара {product_id}: {invalid_ids}")
            raise InvalidVariantError(product_id, invalid_ids, valid_ids)

    async def _prepare_file(self, product_id: int, file: MockupFile) -> MockupFile:
        image_url = await self._public_url(file.image_url)
        position = file.position or await self._auto_position(product_id, file.placement, image_url)
        return MockupFile(placement=file.placement, image_url=image_url, position=position)

    async def _public_url(self, image_url: str) -> str:
        if is_data_url(image_url):
            logger.info("Обнаружен data URL, загружаем в хранилище")
            try:
                mime_type, data = decode_data_url(image_url)
            except ValueError as e:
                raise MockupSubmissionError(str(e)) from e
            try:
                url = await self._storage.upload_buffer(data, mime_type, folder="designs")
            except DomainException as e:
                logger.error(f"Не удалось сохранить файл для мокапа: {e}")
                raise MockupSubmissionError("Не удалось сохранить файл дизайна") from e
            logger.info(f"Файл сохранен: {url}")
            return url

        if image_url.startswith(_LOCAL_PREFIXES):
            raise MockupSubmissionError("Файл дизайна должен быть доступен публично, localhost URL недопустим")

        return image_url

    async def _auto_position(self, product_id: int, placement: str, image_url: str) -> Placement:
        logger.warning("Позиция не передана, вычисляем автоматически")
        try:
            dimensions = await self._prober.probe_dimensions(image_url)
            result = await self._calculate_position(CalculatePositionDTO(
                product_id=product_id,
                placement=placement,
                image_width=dimensions.width,
                image_height=dimensions.height
            ))
            logger.info(f"Вычисленная позиция: {result.position.model_dump()}")
            return result.position
        except DomainException as e:
            logger.error(f"Не удалось вычислить позицию: {e}. Используем позицию по умолчанию")
            return DEFAULT_PLACEMENT.model_copy()
