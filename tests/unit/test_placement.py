"""
Unit tests for placement/validator.py

Bounds, permanent-cell blocking, move/resize edits and object rotation.
"""

import pytest

from flowgrid.core.enums import CellKind
from flowgrid.core.models import PaintedSquare, PlacedObject
from flowgrid.errors import InvalidRotationError
from flowgrid.geometry.grid import GridDimensions, Rect
from flowgrid.placement import PlacementCheck, PlacementValidator


@pytest.fixture
def validator():
    """10 x 10 grid with one permanent cell at row 3, col 4 (D5)."""
    return PlacementValidator(GridDimensions(rows=10, cols=10), permanent_cells=[(3, 4)])


# =============================================================================
# BOUNDS
# =============================================================================

class TestBounds:
    """Test grid bounds checks."""

    def test_full_grid_is_valid(self):
        v = PlacementValidator(GridDimensions(rows=10, cols=10))
        assert v.can_place_zone(Rect(0, 0, 10, 10))

    @pytest.mark.parametrize("rect", [
        Rect(1, 0, 10, 1),     # past last column
        Rect(0, 5, 2, 6),      # past last row
        Rect(-1, 0, 2, 2),     # negative x
        Rect(0, -1, 2, 2),     # negative y
        Rect(0, 0, 0, 3),      # zero width
        Rect(0, 0, 3, 0),      # zero height
    ])
    def test_out_of_bounds_rejected(self, validator, rect):
        check = validator.check_zone(rect)
        assert not check.is_valid
        assert check.reasons
        assert not validator.can_place_object(rect)

    def test_check_is_truthy_when_valid(self, validator):
        assert validator.check_zone(Rect(0, 0, 2, 2))
        assert not validator.check_zone(Rect(9, 9, 2, 2))

    def test_to_dict(self, validator):
        data = validator.check_zone(Rect(4, 3, 1, 1)).to_dict()
        assert data["is_valid"] is False
        assert data["blocked_cells"] == [[3, 4]]


# =============================================================================
# PAINTED CELLS
# =============================================================================

class TestPaintedCells:
    """Test permanent and semi-fixed cell handling."""

    def test_permanent_cell_blocks_zone(self, validator):
        check = validator.check_zone(Rect(x=3, y=2, w=3, h=3))
        assert not check.is_valid
        assert check.blocked_cells == [(3, 4)]
        assert "D5" in check.reasons[0]

    def test_zone_beside_permanent_cell(self, validator):
        assert validator.can_place_zone(Rect(x=5, y=3, w=2, h=2))
        assert validator.can_place_zone(Rect(x=0, y=0, w=4, h=4))

    def test_permanent_cell_does_not_block_object(self, validator):
        assert validator.can_place_object(Rect(x=3, y=2, w=3, h=3))

    def test_semi_fixed_never_blocks(self, build_snapshot):
        snapshot = build_snapshot(painted_squares=[
            PaintedSquare(row=1, col=1, kind=CellKind.SEMI_FIXED),
            PaintedSquare(row=8, col=8, kind=CellKind.PERMANENT),
        ])
        v = PlacementValidator.from_snapshot(snapshot)
        assert v.can_place_zone(Rect(0, 0, 3, 3))
        assert not v.can_place_zone(Rect(7, 7, 3, 3))

    def test_many_blocked_cells_summarised(self):
        cells = [(0, c) for c in range(8)]
        v = PlacementValidator(GridDimensions(rows=10, cols=10), permanent_cells=cells)
        check = v.check_zone(Rect(0, 0, 8, 1))
        assert len(check.blocked_cells) == 8
        assert "(+3 more)" in check.reasons[0]

    def test_out_of_bounds_zone_skips_cell_scan(self):
        v = PlacementValidator(GridDimensions(rows=10, cols=10), permanent_cells=[(0, 0)])
        check = v.check_zone(Rect(0, 0, 100000, 100000))
        assert not check.is_valid
        assert check.blocked_cells == []
        assert all("permanent" not in r for r in check.reasons)

    def test_blocked_cells_sorted(self):
        v = PlacementValidator(GridDimensions(rows=10, cols=10), permanent_cells=[(5, 1), (2, 3), (2, 1)])
        assert v.check_zone(Rect(0, 0, 6, 6)).blocked_cells == [(2, 1), (2, 3), (5, 1)]


# =============================================================================
# EDITS
# =============================================================================

class TestMoveAndResize:
    """Test move and resize checks."""

    def test_move_within_grid(self, validator):
        check = validator.move(Rect(0, 0, 2, 2), dx=8, dy=0)
        assert check.is_valid
        assert check.rect == Rect(8, 0, 2, 2)

    def test_move_past_edge_rejected(self, validator):
        assert not validator.move(Rect(0, 0, 2, 2), dx=9, dy=0).is_valid

    def test_move_onto_permanent_rejected_for_zone_only(self, validator):
        assert not validator.move(Rect(0, 0, 1, 1), dx=4, dy=3).is_valid
        assert validator.move(Rect(0, 0, 1, 1), dx=4, dy=3, is_object=True).is_valid

    def test_resize_anchored_at_origin(self, validator):
        check = validator.resize(Rect(5, 5, 2, 2), dw=1, dh=2)
        assert check.is_valid
        assert check.rect == Rect(5, 5, 3, 4)

    def test_resize_below_one_rejected(self, validator):
        check = validator.resize(Rect(0, 0, 2, 2), dw=-2, dh=0)
        assert not check.is_valid
        assert check.rect.w == 0

    def test_resize_past_edge_rejected(self, validator):
        assert not validator.resize(Rect(8, 8, 2, 2), dw=1, dh=0).is_valid


class TestRotation:
    """Test object rotation."""

    def test_footprint_swaps_on_quarter_turn(self):
        obj = PlacedObject(id="rack", grid_x=0, grid_y=0, grid_width=4, grid_height=2)
        assert obj.footprint() == Rect(0, 0, 4, 2)
        assert PlacedObject(id="rack", grid_x=0, grid_y=0, grid_width=4, grid_height=2,
                            rotation=90).footprint() == Rect(0, 0, 2, 4)
        assert PlacedObject(id="rack", grid_x=0, grid_y=0, grid_width=4, grid_height=2,
                            rotation=180).footprint() == Rect(0, 0, 4, 2)

    def test_rotated_footprint_checked_against_bounds(self):
        v = PlacementValidator(GridDimensions(rows=3, cols=10))
        obj = PlacedObject(id="rack", grid_x=0, grid_y=0, grid_width=4, grid_height=2)
        assert not v.rotate_object(obj, 90).is_valid
        assert v.rotate_object(obj, 180).is_valid

    @pytest.mark.parametrize("rotation", [45, 360, -90])
    def test_invalid_rotation_raises(self, validator, rotation):
        obj = PlacedObject(id="rack", grid_x=0, grid_y=0, grid_width=1, grid_height=1)
        with pytest.raises(InvalidRotationError):
            validator.rotate_object(obj, rotation)


class TestPlacementCheck:
    """Test PlacementCheck records."""

    def test_reject_marks_invalid(self):
        check = PlacementCheck(rect=Rect(0, 0, 1, 1))
        assert check.is_valid
        check.reject("blocked")
        assert not check.is_valid
        assert check.reasons == ["blocked"]
