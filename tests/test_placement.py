"""
Tests for the design placement calculation.
"""

import math

import pytest

from app.domain.exceptions import InvalidDimensionError
from app.domain.models import ImageDimensions, PrintArea
from app.domain.placement import compute_placement


def area(width, height, placement="front"):
    return PrintArea(placement=placement, width=width, height=height)


def design(width, height):
    return ImageDimensions(width=width, height=height)


CASES = [
    (1800, 2400, 1000, 1000),
    (1800, 2400, 4000, 1000),
    (1800, 2400, 1000, 4000),
    (1200, 1200, 333, 777),
    (1200, 1200, 777, 333),
    (1800, 2400, 1, 1),
    (999, 1333, 1919, 1081),
    (3, 7, 5000, 11),
]


class TestComputePlacement:
    """Fit-inside placement with centering."""

    @pytest.mark.parametrize("aw,ah,dw,dh", CASES)
    def test_fits_inside_and_is_centered(self, aw, ah, dw, dh):
        p = compute_placement(area(aw, ah), design(dw, dh))

        assert p.area_width == aw and p.area_height == ah
        assert 0 <= p.left and 0 <= p.top
        assert p.left + p.width <= aw
        assert p.top + p.height <= ah
        assert p.left == math.floor((aw - p.width) / 2 + 0.5)
        assert p.top == math.floor((ah - p.height) / 2 + 0.5)
        assert p.width == aw or p.height == ah

    @pytest.mark.parametrize("aw,ah,dw,dh", CASES[:6])
    def test_preserves_aspect_ratio_within_a_pixel(self, aw, ah, dw, dh):
        p = compute_placement(area(aw, ah), design(dw, dh))

        if p.width == aw:
            assert abs(p.height - aw * dh / dw) <= 1
        else:
            assert abs(p.width - ah * dw / dh) <= 1

    def test_square_design_on_portrait_area(self):
        p = compute_placement(area(1800, 2400), design(1000, 1000))

        assert (p.width, p.height, p.left, p.top) == (1800, 1800, 0, 300)

    def test_wide_design_fits_to_width(self):
        p = compute_placement(area(1800, 2400), design(4000, 1000))

        assert (p.width, p.height, p.left, p.top) == (1800, 450, 0, 975)

    def test_tall_design_fits_to_height(self):
        p = compute_placement(area(1800, 2400), design(1000, 4000))

        assert (p.width, p.height, p.left, p.top) == (600, 2400, 600, 0)

    def test_same_aspect_ratio_fills_area(self):
        p = compute_placement(area(1800, 2400), design(900, 1200))

        assert (p.width, p.height, p.left, p.top) == (1800, 2400, 0, 0)

    def test_is_deterministic(self):
        first = compute_placement(area(999, 1333), design(1919, 1081))
        second = compute_placement(area(999, 1333), design(1919, 1081))

        assert first == second

    @pytest.mark.parametrize("aw,ah,dw,dh", [
        (0, 2400, 100, 100),
        (1800, -1, 100, 100),
        (1800, 2400, 0, 100),
        (1800, 2400, 100, -5),
        (float("nan"), 2400, 100, 100),
        (1800, float("inf"), 100, 100),
    ])
    def test_rejects_non_positive_or_non_finite(self, aw, ah, dw, dh):
        with pytest.raises(InvalidDimensionError):
            compute_placement(area(aw, ah), design(dw, dh))
