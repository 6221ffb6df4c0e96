import logging
from typing import Optional

from app.domain.models import PrintArea, SupplierPrintArea
from app.domain.exceptions import TemplateNotFoundError, PrintAreaNotFoundError
from app.application.interfaces import SupplierService

logger = logging.getLogger(__name__)

# У поставщика основная позиция называется "default", у нас "front"
PRIMARY_PLACEMENTS = {"front", "default"}

DEFAULT_AREA_WIDTH = 1800
DEFAULT_AREA_HEIGHT = 2400


def placements_match(requested: str, candidate: Optional[str]) -> bool:
    if candidate is None:
        return False
    if requested == candidate:
        return True
    return requested in PRIMARY_PLACEMENTS and candidate in PRIMARY_PLACEMENTS


class ResolvePrintAreaUseCase:
    def __init__(self, supplier: SupplierService):
        self._supplier = supplier

    async def __call__(self, product_id: int, placement: str = "front") -> PrintArea:
        logger.info(f"Получение шаблона мокапа для товара {product_id}")
        templates = await self._supplier.get_mockup_templates(product_id)
        if not templates:
            raise TemplateNotFoundError(f"Для товара {product_id} нет шаблонов мокапа")

        template = templates[0]
        area = next((pa for pa in template.print_areas if placements_match(placement, pa.placement)), None)
        if area is None:
            if not template.print_areas:
                raise PrintAreaNotFoundError(f"В шаблоне товара {product_id} нет областей печати")
            area = template.print_areas[0]
            logger.warning(
                f"Размещение '{placement}' не найдено для товара {product_id}, "
                f"используем первую область '{area.placement}'"
            )

        return self._to_print_area(area, placement)

    @staticmethod
    def _to_print_area(area: SupplierPrintArea, requested: str) -> PrintArea:
        return PrintArea(
            placement=area.placement or requested,
            width=area.width or DEFAULT_AREA_WIDTH,
            height=area.height or DEFAULT_AREA_HEIGHT,
        )
