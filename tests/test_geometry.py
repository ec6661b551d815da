"""Tests for rectangle clamping."""

from __future__ import annotations

import itertools

import numpy as np
import pytest

from facebox.imaging.geometry import ClampedRectangle, Dimensions, Rectangle, clamp

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_COORDS = (-500, -10, -1, 0, 1, 50, 99, 100, 101, 250, 10_000)
_SIZES = (-20, -1, 0, 1, 10, 50, 150, 10_000)
_DIMS = (Dimensions(100, 100), Dimensions(300, 120), Dimensions(1, 1), Dimensions(0, 0))


def _all_rectangles() -> list[Rectangle]:
    return [
        Rectangle(x, y, w, h)
        for x, y in itertools.product(_COORDS, repeat=2)
        for w, h in itertools.product(_SIZES, repeat=2)
        if (w, h) in {(10, 10), (150, 150), (-1, 10), (10, 0), (10_000, 1)} or x == y
    ]


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


class TestClampScenarios:
    def test_negative_origin_floored(self) -> None:
        assert clamp(Rectangle(-10, -10, 150, 150), Dimensions(300, 300)) == ClampedRectangle(0, 0, 150, 150)

    def test_overhang_is_trimmed(self) -> None:
        assert clamp(Rectangle(90, 90, 50, 50), Dimensions(100, 100)) == ClampedRectangle(90, 90, 10, 10)

    def test_origin_past_edge_is_empty(self) -> None:
        clamped = clamp(Rectangle(200, 0, 10, 10), Dimensions(100, 100))
        assert clamped.is_empty
        assert clamped.width == 0

    def test_fully_inside_unchanged(self) -> None:
        assert clamp(Rectangle(10, 20, 30, 40), Dimensions(100, 100)) == ClampedRectangle(10, 20, 30, 40)

    @pytest.mark.parametrize(("width", "height"), [(0, 10), (10, 0), (-5, 10), (10, -5), (-1, -1)])
    def test_non_positive_size_is_empty(self, width: int, height: int) -> None:
        clamped = clamp(Rectangle(10, 10, width, height), Dimensions(100, 100))
        assert clamped.is_empty
        assert clamped.area == 0

    def test_negative_origin_does_not_shrink_width(self) -> None:
        # The origin is floored, not shifted with the size.
        assert clamp(Rectangle(-50, 0, 60, 10), Dimensions(100, 100)) == ClampedRectangle(0, 0, 60, 10)

    def test_zero_sized_image(self) -> None:
        assert clamp(Rectangle(0, 0, 10, 10), Dimensions(0, 0)).is_empty


# ---------------------------------------------------------------------------
# Invariants
# ---------------------------------------------------------------------------


class TestClampInvariants:
    def test_result_always_inside_image(self) -> None:
        for dims in _DIMS:
            for rect in _all_rectangles():
                c = clamp(rect, dims)
                assert c.x >= 0 and c.y >= 0 and c.width >= 0 and c.height >= 0
                assert c.x + c.width <= dims.width
                assert c.y + c.height <= dims.height

    def test_idempotent(self) -> None:
        for dims in _DIMS:
            for rect in _all_rectangles():
                once = clamp(rect, dims)
                assert clamp(once.as_rectangle(), dims) == once

    def test_empty_means_zero_area(self) -> None:
        for rect in _all_rectangles():
            c = clamp(rect, Dimensions(100, 100))
            assert c.is_empty == (c.area == 0)


class TestDimensions:
    def test_of_array(self) -> None:
        image = np.zeros((40, 70, 3), dtype=np.uint8)
        assert Dimensions.of(image) == Dimensions(width=70, height=40)
