import math

from app.domain.models import Placement, PrintArea, ImageDimensions
from app.domain.exceptions import InvalidDimensionError


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _check_dimension(name: str, value: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidDimensionError(f"{name} должно быть числом, получено {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise InvalidDimensionError(f"{name} должно быть положительным конечным числом, получено {value}")


def compute_placement(print_area: PrintArea, design: ImageDimensions) -> Placement:
    """Вписывает дизайн в область печати с сохранением пропорций и центрирует его.

    Если дизайн относительно шире области, он растягивается на всю ширину,
    иначе на всю высоту. Размеры и отступы округляются до целых пикселей.
    """
    _check_dimension("print_area.width", print_area.width)
    _check_dimension("print_area.height", print_area.height)
    _check_dimension("design.width", design.width)
    _check_dimension("design.height", design.height)

    area_width = max(1, _round_half_up(print_area.width))
    area_height = max(1, _round_half_up(print_area.height))
    design_ratio = design.width / design.height
    area_ratio = print_area.width / print_area.height

    if design_ratio > area_ratio:
        width = area_width
        height = min(max(1, _round_half_up(print_area.width / design_ratio)), area_height)
    else:
        height = area_height
        width = min(max(1, _round_half_up(print_area.height * design_ratio)), area_width)

    return Placement(
        area_width=area_width,
        area_height=area_height,
        width=width,
        height=height,
        top=_round_half_up((area_height - height) / 2),
        left=_round_half_up((area_width - width) / 2),
    )
