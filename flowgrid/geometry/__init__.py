"""
flowgrid/geometry - Grid geometry.

Only the pure coordinate math is re-exported here. Corridor geometry
(flowgrid.geometry.corridors) and floor classification
(flowgrid.geometry.cells) work on layout records and are imported
from their modules.
"""

from .grid import (
    GridDimensions,
    Rect,
    round_half_up,
    to_grid_dims,
    rect_overlaps_cell,
    center_of,
    distance,
    manhattan,
    cell_to_pixel,
    pixel_to_cell,
    row_label,
    col_label,
    cell_label,
)

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
