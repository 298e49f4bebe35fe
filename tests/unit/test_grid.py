"""
Unit tests for geometry/grid.py

Grid dimensions, rectangle tests, centre distances, pixel conversion
and cell labels.
"""

import pytest

from flowgrid.errors import GridConfigurationError
from flowgrid.geometry.grid import (
    GridDimensions,
    Rect,
    cell_label,
    cell_to_pixel,
    center_of,
    distance,
    pixel_to_cell,
    rect_overlaps_cell,
    round_half_up,
    row_label,
    to_grid_dims,
)


# =============================================================================
# ROUNDING
# =============================================================================

class TestRoundHalfUp:
    """Test half-up rounding."""

    @pytest.mark.parametrize("value,expected", [
        (0.5, 1),
        (2.5, 3),
        (3.5, 4),
        (2.49, 2),
        (-2.5, -3),
        (7.0, 7),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_differs_from_bankers_rounding(self):
        assert round(2.5) == 2
        assert round_half_up(2.5) == 3


# =============================================================================
# GRID DIMENSIONS
# =============================================================================

class TestGridDimensions:
    """Test dimension derivation."""

    def test_exact_division(self):
        dims = to_grid_dims(100, 80, 5)
        assert dims == GridDimensions(rows=16, cols=20)
        assert dims.total_squares == 320

    def test_ceiling_division(self):
        dims = to_grid_dims(101, 80, 5)
        assert dims.cols == 21
        assert dims.rows == 16

    def test_minimum_one_by_one(self):
        assert to_grid_dims(0, 0, 5) == GridDimensions(rows=1, cols=1)

    @pytest.mark.parametrize("square_size", [0, -1])
    def test_non_positive_square_size_raises(self, square_size):
        with pytest.raises(GridConfigurationError) as exc_info:
            to_grid_dims(100, 100, square_size)
        assert exc_info.value.details["param"] == "square_size"

    def test_contains(self):
        dims = GridDimensions(rows=3, cols=4)
        assert dims.contains(0, 0)
        assert dims.contains(2, 3)
        assert not dims.contains(3, 0)
        assert not dims.contains(0, 4)
        assert not dims.contains(-1, 0)


# =============================================================================
# RECTANGLES
# =============================================================================

class TestRect:
    """Test rectangle helpers."""

    def test_overlap_is_half_open(self):
        rect = Rect(x=2, y=3, w=4, h=2)
        assert rect_overlaps_cell(rect, 3, 2)
        assert rect_overlaps_cell(rect, 4, 5)
        assert not rect_overlaps_cell(rect, 5, 2)
        assert not rect_overlaps_cell(rect, 3, 6)
        assert not rect_overlaps_cell(rect, 2, 3)

    def test_cells_cover_area(self):
        rect = Rect(x=1, y=1, w=3, h=2)
        cells = list(rect.cells())
        assert len(cells) == rect.area == 6
        assert (1, 1) in cells
        assert (2, 3) in cells

    def test_intersects(self):
        a = Rect(0, 0, 2, 2)
        assert a.intersects(Rect(1, 1, 2, 2))
        assert not a.intersects(Rect(2, 0, 2, 2))

    def test_center_is_row_col(self):
        assert center_of(Rect(x=2, y=4, w=2, h=4)) == (6.0, 3.0)


# =============================================================================
# DISTANCE
# =============================================================================

class TestDistance:
    """Test centre-to-centre distance."""

    def test_horizontal_distance(self):
        a = Rect(x=2, y=2, w=2, h=2)
        b = Rect(x=7, y=2, w=2, h=2)
        assert distance(a, b) == 5

    def test_symmetric(self):
        a = Rect(x=0, y=0, w=3, h=1)
        b = Rect(x=5, y=4, w=1, h=2)
        assert distance(a, b) == distance(b, a)

    def test_zero_for_same_rect(self):
        a = Rect(x=3, y=3, w=2, h=2)
        assert distance(a, a) == 0

    def test_half_rounds_up(self):
        # Centres (0.5, 0.5) and (0.5, 6.0): 5.5 cells apart
        a = Rect(x=0, y=0, w=1, h=1)
        b = Rect(x=5, y=0, w=2, h=1)
        assert distance(a, b) == 6

    def test_diagonal_distance(self):
        # 3-4-5 triangle between centres
        a = Rect(x=0, y=0, w=2, h=2)
        b = Rect(x=4, y=3, w=2, h=2)
        assert distance(a, b) == 5


# =============================================================================
# PIXELS AND LABELS
# =============================================================================

class TestPixelConversion:
    """Test cell/pixel conversion."""

    def test_cell_to_pixel_is_cell_centre(self):
        assert cell_to_pixel(2, 3, 10, margin=5) == (40.0, 30.0)

    def test_pixel_to_cell(self):
        assert pixel_to_cell(40, 30, 10, margin=5) == (2, 3)

    def test_pixel_on_cell_edge(self):
        assert pixel_to_cell(10, 0, 10) == (0, 1)

    def test_zero_cell_size_raises(self):
        with pytest.raises(GridConfigurationError):
            pixel_to_cell(1, 1, 0)


class TestLabels:
    """Test spreadsheet-style cell labels."""

    @pytest.mark.parametrize("row,expected", [
        (0, "A"),
        (25, "Z"),
        (26, "AA"),
        (27, "AB"),
        (51, "AZ"),
        (52, "BA"),
    ])
    def test_row_label(self, row, expected):
        assert row_label(row) == expected

    def test_cell_label(self):
        assert cell_label(0, 0) == "A1"
        assert cell_label(27, 11) == "AB12"
