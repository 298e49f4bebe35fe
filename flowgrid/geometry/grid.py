"""
flowgrid/geometry/grid.py - Grid geometry

Pure coordinate math for the floor grid: dimension derivation,
rectangle/cell tests, centre distances, pixel conversion and
human-readable cell labels.

All rounding goes through round_half_up(). Python's round() uses
banker's rounding, which would move the closeness thresholds at
exact .5 distances.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Tuple
import math

from flowgrid.errors import GridConfigurationError

__all__ = [
    'GridDimensions',
    'Rect',
    'round_half_up',
    'to_grid_dims',
    'rect_overlaps_cell',
    'center_of',
    'distance',
    'manhattan',
    'cell_to_pixel',
    'pixel_to_cell',
    'row_label',
    'col_label',
    'cell_label',
]


# =============================================================================
# ROUNDING
# =============================================================================

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value < 0:
        return -int(math.floor(-value + 0.5))
    return int(math.floor(value + 0.5))


# =============================================================================
# GRID DIMENSIONS
# =============================================================================

@dataclass(frozen=True)
class GridDimensions:
    """Rows and columns of the floor grid."""
    rows: int
    cols: int

    @property
    def total_squares(self) -> int:
        return self.rows * self.cols

    def contains(self, row: int, col: int) -> bool:
        """Is (row, col) inside the grid?"""
        return 0 <= row < self.rows and 0 <= col < self.cols

    def to_dict(self):
        return {"rows": self.rows, "cols": self.cols}


def to_grid_dims(
    facility_width: float,
    facility_height: float,
    square_size: float,
) -> GridDimensions:
    """
    Derive grid dimensions from facility size.

    Ceiling division on each axis, never fewer than one row or column.

    Raises:
        GridConfigurationError: square_size is not positive
    """
    if square_size is None or square_size <= 0:
        raise GridConfigurationError("square_size", square_size)

    rows = max(1, math.ceil(max(facility_height, 0) / square_size))
    cols = max(1, math.ceil(max(facility_width, 0) / square_size))
    return GridDimensions(rows=rows, cols=cols)


# =============================================================================
# RECTANGLES
# =============================================================================

@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned grid rectangle.

    Attributes:
        x: Left column
        y: Top row
        w: Width in columns
        h: Height in rows
    """
    x: int
    y: int
    w: int
    h: int

    @property
    def area(self) -> int:
        return self.w * self.h

    @property
    def right(self) -> int:
        """Exclusive right column."""
        return self.x + self.w

    @property
    def bottom(self) -> int:
        """Exclusive bottom row."""
        return self.y + self.h

    def contains_cell(self, row: int, col: int) -> bool:
        return rect_overlaps_cell(self, row, col)

    def cells(self) -> Iterator[Tuple[int, int]]:
        """Yield every covered (row, col)."""
        for row in range(self.y, self.y + self.h):
            for col in range(self.x, self.x + self.w):
                yield row, col

    def intersects(self, other: "Rect") -> bool:
        return not (
            self.right <= other.x or
            other.right <= self.x or
            self.bottom <= other.y or
            other.bottom <= self.y
        )


def rect_overlaps_cell(rect: Rect, row: int, col: int) -> bool:
    """Half-open test: row in [y, y+h) and col in [x, x+w)."""
    return rect.y <= row < rect.y + rect.h and rect.x <= col < rect.x + rect.w


def center_of(rect: Rect) -> Tuple[float, float]:
    """Centre of a rectangle as (row, col) floats."""
    return rect.y + rect.h / 2, rect.x + rect.w / 2


def distance(rect_a: Rect, rect_b: Rect) -> int:
    """
    Centre-to-centre Euclidean distance in cells, rounded half-up.

    This integer is the unit every closeness threshold is compared in.
    """
    row_a, col_a = center_of(rect_a)
    row_b, col_b = center_of(rect_b)
    return round_half_up(math.hypot(row_a - row_b, col_a - col_b))


def manhattan(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """Manhattan distance between two (x, y) points."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


# =============================================================================
# PIXEL CONVERSION
# =============================================================================

def cell_to_pixel(
    row: int,
    col: int,
    cell_size: float,
    margin: float = 0.0,
) -> Tuple[float, float]:
    """Pixel (x, y) of a cell's centre."""
    return (
        margin + col * cell_size + cell_size / 2,
        margin + row * cell_size + cell_size / 2,
    )


def pixel_to_cell(
    x: float,
    y: float,
    cell_size: float,
    margin: float = 0.0,
) -> Tuple[int, int]:
    """(row, col) of the cell under a pixel position."""
    if cell_size <= 0:
        raise GridConfigurationError("cell_size", cell_size)
    return (
        int(math.floor((y - margin) / cell_size)),
        int(math.floor((x - margin) / cell_size)),
    )


# =============================================================================
# CELL LABELS
# =============================================================================

def row_label(row: int) -> str:
    """Spreadsheet-style row letters: 0 -> A, 25 -> Z, 26 -> AA."""
    label = ""
    num = row
    while num >= 0:
        label = chr(65 + num % 26) + label
        num = num // 26 - 1
    return label


def col_label(col: int) -> str:
    """One-based column number."""
    return str(col + 1)


def cell_label(row: int, col: int) -> str:
    """Label such as 'A1' or 'AB12'."""
    return f"{row_label(row)}{col_label(col)}"
