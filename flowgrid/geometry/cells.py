"""
flowgrid/geometry/cells.py - Floor cell classification

Types every grid cell for safety analysis and answers pedestrian
reachability questions over the typed grid.

Classification is layered; each layer overrides the ones before it:
    permanent squares -> OBSTACLE
    door cells        -> DOOR
    corridor cells    -> PEDESTRIAN / EQUIPMENT (forklift wins on overlap)
    assigned zones    -> STAGING / WORK (by activity kind)
"""

from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple
from dataclasses import dataclass, field
import logging

import networkx as nx

from flowgrid.core.enums import ActivityKind, CellType, CorridorKind
from flowgrid.core.snapshot import LayoutSnapshot

from .corridors import corridor_cells, door_cells
from .grid import GridDimensions

__all__ = [
    'FloorMap',
    'classify_cells',
    'WalkGraph',
]

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]

_ZONE_CELL_TYPES = {
    ActivityKind.STAGING_LANE: CellType.STAGING,
    ActivityKind.WORK_AREA: CellType.WORK,
}

NEIGHBORS_4 = ((-1, 0), (1, 0), (0, -1), (0, 1))
DIAGONALS = ((-1, -1), (-1, 1), (1, -1), (1, 1))


# =============================================================================
# FLOOR MAP
# =============================================================================

@dataclass
class FloorMap:
    """
    Typed view of the grid.

    Attributes:
        dims: Grid dimensions
        types: Cell type for every non-empty cell
        corridor_kinds: Corridor kinds covering each corridor cell
        door_at: Door id for each door cell
    """
    dims: GridDimensions
    types: Dict[Cell, CellType] = field(default_factory=dict)
    corridor_kinds: Dict[Cell, Set[CorridorKind]] = field(default_factory=dict)
    door_at: Dict[Cell, str] = field(default_factory=dict)

    def type_at(self, row: int, col: int) -> CellType:
        """Cell type; off-grid cells read as OBSTACLE."""
        if not self.dims.contains(row, col):
            return CellType.OBSTACLE
        return self.types.get((row, col), CellType.EMPTY)

    def cells_of_type(self, cell_type: CellType) -> List[Cell]:
        return sorted(c for c, t in self.types.items() if t == cell_type)

    def crossing_cells(self) -> List[Cell]:
        """Cells covered by both a pedestrian and a forklift corridor."""
        both = {CorridorKind.PEDESTRIAN, CorridorKind.FORKLIFT}
        return sorted(c for c, kinds in self.corridor_kinds.items() if both <= kinds)

    def neighbors(self, row: int, col: int) -> List[Cell]:
        """In-grid 4-neighbours."""
        return [
            (row + dr, col + dc) for dr, dc in NEIGHBORS_4
            if self.dims.contains(row + dr, col + dc)
        ]

    def counts(self) -> Dict[str, int]:
        result = {t.value: 0 for t in CellType}
        for t in self.types.values():
            result[t.value] += 1
        result[CellType.EMPTY.value] = self.dims.total_squares - len(self.types)
        return result


def classify_cells(snapshot: LayoutSnapshot) -> FloorMap:
    """Build the FloorMap for a snapshot."""
    dims = snapshot.dimensions
    floor = FloorMap(dims=dims)

    for cell in snapshot.permanent_cells():
        if dims.contains(*cell):
            floor.types[cell] = CellType.OBSTACLE

    for door in snapshot.doors:
        for cell in door_cells(door, dims):
            floor.types[cell] = CellType.DOOR
            floor.door_at[cell] = door.id

    for corridor in snapshot.corridors:
        for cell in corridor_cells(corridor, dims):
            floor.corridor_kinds.setdefault(cell, set()).add(corridor.kind)

    for cell, kinds in floor.corridor_kinds.items():
        if CorridorKind.FORKLIFT in kinds:
            floor.types[cell] = CellType.EQUIPMENT
        else:
            floor.types[cell] = CellType.PEDESTRIAN

    for zone in snapshot.zones:
        activity = snapshot.activity(zone.activity_id)
        if activity is None:
            continue
        cell_type = _ZONE_CELL_TYPES.get(activity.kind)
        if cell_type is None:
            continue
        for cell in zone.rect.cells():
            if dims.contains(*cell):
                floor.types[cell] = cell_type

    logger.debug(f"Classified floor: {floor.counts()}")
    return floor


# =============================================================================
# PEDESTRIAN REACHABILITY
# =============================================================================

class WalkGraph:
    """
    Connectivity of the cells a pedestrian may walk through.

    Endpoints are allowed to sit on any non-equipment cell: an endpoint
    outside the walkable set connects through its walkable neighbours.
    Any route touching EQUIPMENT counts as crossing forklift traffic,
    so an equipment endpoint is never safely reachable.
    """

    def __init__(self, floor: FloorMap, walkable: Iterable[CellType]):
        self.floor = floor
        self.walkable: FrozenSet[CellType] = frozenset(walkable) - {CellType.EQUIPMENT}

        grid = nx.grid_2d_graph(floor.dims.rows, floor.dims.cols)
        nodes = [n for n in grid.nodes if floor.type_at(*n) in self.walkable]
        self.graph = grid.subgraph(nodes)

        self._component: Dict[Cell, int] = {}
        for idx, comp in enumerate(nx.connected_components(self.graph)):
            for cell in comp:
                self._component[cell] = idx

        logger.debug(
            f"Walk graph over {sorted(t.value for t in self.walkable)}: "
            f"{len(nodes)} cells, {len(set(self._component.values()))} components"
        )

    def _endpoint_components(self, cell: Cell) -> Set[int]:
        if cell in self._component:
            return {self._component[cell]}
        return {
            self._component[n] for n in self.floor.neighbors(*cell)
            if n in self._component
        }

    def is_reachable(self, start: Cell, end: Cell) -> bool:
        """Is there a walk from start to end that avoids equipment?"""
        if not (self.floor.dims.contains(*start) and self.floor.dims.contains(*end)):
            return False
        if CellType.EQUIPMENT in (self.floor.type_at(*start), self.floor.type_at(*end)):
            return False
        if start == end:
            return True
        if abs(start[0] - end[0]) + abs(start[1] - end[1]) == 1:
            return True
        return bool(self._endpoint_components(start) & self._endpoint_components(end))

    def find_path(self, start: Cell, end: Cell) -> Optional[List[Cell]]:
        """Shortest walkable path between two walkable cells, or None."""
        try:
            return nx.shortest_path(self.graph, start, end)
        except (nx.NetworkXNoPath, nx.NodeNotFound):
            return None
