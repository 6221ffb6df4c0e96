import logging
from pydantic import BaseModel

from app.domain.models import Placement, PrintArea, ImageDimensions
from app.domain.placement import compute_placement
from app.application.resolve_print_area import ResolvePrintAreaUseCase

logger = logging.getLogger(__name__)


class CalculatePositionDTO(BaseModel):
    product_id: int
    placement: str = "front"
    image_width: int
    image_height: int


class PositionResult(BaseModel):
    position: Placement
    print_area: PrintArea
    design: ImageDimensions
    aspect_ratio: float


class CalculatePositionUseCase:
    """Шаблон поставщика + размеры дизайна → позиция для генератора мокапов"""

    def __init__(self, resolve_print_area: ResolvePrintAreaUseCase):
        self._resolve_print_area = resolve_print_area

    async def __call__(self, dto: CalculatePositionDTO) -> PositionResult:
        print_area = await self._resolve_print_area(dto.product_id, dto.placement)
        design = ImageDimensions(width=dto.image_width, height=dto.image_height)
        position = compute_placement(print_area, design)

        logger.info(
            f"Позиция для {print_area.placement}: {position.model_dump()} "
            f"(область {print_area.width}x{print_area.height}, дизайн {design.width}x{design.height})"
        )
        return PositionResult(
            position=position,
            print_area=print_area,
            design=design,
            aspect_ratio=design.width / design.height
        )
