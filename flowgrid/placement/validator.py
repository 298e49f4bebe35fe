"""
flowgrid/placement/validator.py - Placement validation

Pure predicates deciding whether a zone or object rectangle may occupy
a position on the grid. Nothing here mutates layout state; the state
container asks first and applies only valid edits.

Zones are blocked by permanent painted cells. Objects are only bounds
checked, since equipment may sit on top of painted fixtures. Semi-fixed
cells never block anything.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Iterable, List, Tuple
import logging

from flowgrid.core.models import VALID_ROTATIONS, PlacedObject
from flowgrid.core.snapshot import LayoutSnapshot
from flowgrid.errors import InvalidRotationError
from flowgrid.geometry.grid import GridDimensions, Rect, cell_label

__all__ = [
    'PlacementCheck',
    'PlacementValidator',
]

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]


# =============================================================================
# RESULT
# =============================================================================

@dataclass
class PlacementCheck:
    """
    Outcome of a placement check.

    Attributes:
        rect: Candidate rectangle that was checked
        is_valid: Whether the rectangle may be placed
        reasons: Human-readable rejection reasons
        blocked_cells: Permanent cells under the rectangle
    """
    rect: Rect
    is_valid: bool = True
    reasons: List[str] = field(default_factory=list)
    blocked_cells: List[Cell] = field(default_factory=list)

    def reject(self, reason: str) -> None:
        self.reasons.append(reason)
        self.is_valid = False

    def __bool__(self) -> bool:
        return self.is_valid

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rect": {"x": self.rect.x, "y": self.rect.y, "w": self.rect.w, "h": self.rect.h},
            "is_valid": self.is_valid,
            "reasons": list(self.reasons),
            "blocked_cells": [list(c) for c in self.blocked_cells],
        }


# =============================================================================
# VALIDATOR
# =============================================================================

class PlacementValidator:
    """
    Validates rectangles against grid bounds and permanent cells.

    Usage:
        validator = PlacementValidator.from_snapshot(snapshot)
        if validator.can_place_zone(Rect(2, 3, 4, 4)):
            ...
    """

    def __init__(self, dims: GridDimensions, permanent_cells: Iterable[Cell] = ()):
        self.dims = dims
        self.permanent_cells: FrozenSet[Cell] = frozenset(permanent_cells)

    @classmethod
    def from_snapshot(cls, snapshot: LayoutSnapshot) -> "PlacementValidator":
        return cls(snapshot.dimensions, snapshot.permanent_cells())

    # -------------------------------------------------------------------------
    # Checks
    # -------------------------------------------------------------------------

    def _check_bounds(self, rect: Rect) -> PlacementCheck:
        check = PlacementCheck(rect=rect)

        if rect.w < 1 or rect.h < 1:
            check.reject(f"size {rect.w}x{rect.h} must be at least 1x1")
        if rect.x < 0 or rect.y < 0:
            check.reject(f"origin ({rect.x}, {rect.y}) is outside the grid")
        if rect.right > self.dims.cols:
            check.reject(f"extends past column {self.dims.cols}")
        if rect.bottom > self.dims.rows:
            check.reject(f"extends past row {self.dims.rows}")

        return check

    def check_zone(self, rect: Rect) -> PlacementCheck:
        """Bounds plus no covered permanent cell."""
        check = self._check_bounds(rect)
        if not check.is_valid:
            return check

        blocked = sorted(c for c in self.permanent_cells if rect.contains_cell(*c))
        if blocked:
            check.blocked_cells = blocked
            labels = ", ".join(cell_label(*c) for c in blocked[:5])
            more = f" (+{len(blocked) - 5} more)" if len(blocked) > 5 else ""
            check.reject(f"covers permanent cells {labels}{more}")

        return check

    def check_object(self, rect: Rect) -> PlacementCheck:
        """Bounds only."""
        return self._check_bounds(rect)

    def can_place_zone(self, rect: Rect) -> bool:
        return self.check_zone(rect).is_valid

    def can_place_object(self, rect: Rect) -> bool:
        return self.check_object(rect).is_valid

    # -------------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------------

    def move(self, rect: Rect, dx: int, dy: int, *, is_object: bool = False) -> PlacementCheck:
        """Check a rectangle translated by (dx, dy)."""
        moved = replace(rect, x=rect.x + dx, y=rect.y + dy)
        return self.check_object(moved) if is_object else self.check_zone(moved)

    def resize(self, rect: Rect, dw: int, dh: int, *, is_object: bool = False) -> PlacementCheck:
        """
        Check a rectangle resized by (dw, dh), anchored at its origin.

        Shrinking below 1x1 is rejected rather than clamped.
        """
        resized = replace(rect, w=rect.w + dw, h=rect.h + dh)
        return self.check_object(resized) if is_object else self.check_zone(resized)

    def rotate_object(self, obj: PlacedObject, rotation: int) -> PlacementCheck:
        """
        Check an object at a new rotation.

        Raises:
            InvalidRotationError: rotation is not a quarter turn
        """
        if rotation not in VALID_ROTATIONS:
            raise InvalidRotationError(rotation)

        rotated = replace(obj, rotation=rotation).footprint()
        check = self.check_object(rotated)
        if not check.is_valid:
            logger.debug(f"Rotation of {obj.id} to {rotation} rejected: {check.reasons}")
        return check
