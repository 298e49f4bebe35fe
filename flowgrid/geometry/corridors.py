"""
flowgrid/geometry/corridors.py - Corridor and door geometry

Cell coverage for corridors and doors, plus a weighted waypoint graph
of the corridor network for route lengths and connectivity.
"""

from typing import Dict, Iterable, List, Optional, Set, Tuple
from dataclasses import dataclass, field
import logging

import networkx as nx

from flowgrid.core.enums import CorridorKind, DoorEdge
from flowgrid.core.models import Corridor, Door, Point

from .grid import GridDimensions, Rect

__all__ = [
    'segment_cells',
    'corridor_cells',
    'door_cells',
    'corridor_touches_rect',
    'CorridorRoute',
    'build_corridor_graph',
    'nearest_node',
    'find_corridor_route',
    'get_network_components',
]

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]
Node = Tuple[int, int]


# =============================================================================
# CELL COVERAGE
# =============================================================================

def segment_cells(a: Point, b: Point, width: int) -> Set[Cell]:
    """
    Cells covered by one corridor segment, as (row, col).

    Horizontal segments widen downward, vertical segments widen to the
    right. A segment that is neither is walked as an L through the
    corner (b.x, a.y).
    """
    width = max(width, 1)
    cells: Set[Cell] = set()

    if a.y == b.y:
        for row in range(a.y, a.y + width):
            for col in range(min(a.x, b.x), max(a.x, b.x) + 1):
                cells.add((row, col))
    elif a.x == b.x:
        for col in range(a.x, a.x + width):
            for row in range(min(a.y, b.y), max(a.y, b.y) + 1):
                cells.add((row, col))
    else:
        corner = Point(b.x, a.y)
        cells |= segment_cells(a, corner, width)
        cells |= segment_cells(corner, b, width)

    return cells


def corridor_cells(corridor: Corridor, dims: Optional[GridDimensions] = None) -> Set[Cell]:
    """All cells a corridor covers, clipped to the grid when dims is given."""
    pts = corridor.waypoints()
    cells: Set[Cell] = set()
    for a, b in zip(pts, pts[1:]):
        cells |= segment_cells(a, b, corridor.width)

    if dims is not None:
        cells = {c for c in cells if dims.contains(*c)}
    return cells


def door_cells(door: Door, dims: Optional[GridDimensions] = None) -> List[Cell]:
    """Cells along the wall the door occupies, in order."""
    width = max(door.width, 1)
    if door.edge in (DoorEdge.TOP, DoorEdge.BOTTOM):
        cells = [(door.grid_y, door.grid_x + i) for i in range(width)]
    else:
        cells = [(door.grid_y + i, door.grid_x) for i in range(width)]

    if dims is not None:
        cells = [c for c in cells if dims.contains(*c)]
    return cells


def corridor_touches_rect(corridor: Corridor, rect: Rect) -> bool:
    """Does any corridor cell fall inside the rectangle?"""
    return any(rect.contains_cell(row, col) for row, col in corridor_cells(corridor))


# =============================================================================
# CORRIDOR GRAPH
# =============================================================================

@dataclass
class CorridorRoute:
    """Route through the corridor network between two grid points."""
    nodes: List[Node] = field(default_factory=list)
    network_length: float = 0.0
    access_length: float = 0.0   # Off-network legs to and from the route ends

    @property
    def total_length(self) -> float:
        return self.network_length + self.access_length

    def to_dict(self) -> Dict:
        return {
            "nodes": [list(n) for n in self.nodes],
            "network_length": self.network_length,
            "access_length": self.access_length,
            "total_length": self.total_length,
        }


def build_corridor_graph(
    corridors: Iterable[Corridor],
    kinds: Optional[Iterable[CorridorKind]] = None,
) -> nx.Graph:
    """
    Build an undirected waypoint graph.

    Nodes are (x, y) waypoints; corridors sharing a waypoint are joined
    there. Edges carry a Manhattan 'weight' and the ids of the
    corridors that run along them.

    Args:
        corridors: Corridors to include
        kinds: Restrict to these corridor kinds (all when None)
    """
    allowed = set(kinds) if kinds is not None else None
    graph = nx.Graph()

    for corridor in corridors:
        if allowed is not None and corridor.kind not in allowed:
            continue
        pts = corridor.waypoints()
        for p in pts:
            graph.add_node((p.x, p.y))
        for a, b in zip(pts, pts[1:]):
            u, v = (a.x, a.y), (b.x, b.y)
            if u == v:
                continue
            weight = abs(a.x - b.x) + abs(a.y - b.y)
            if graph.has_edge(u, v):
                graph[u][v]['corridors'].append(corridor.id)
                graph[u][v]['weight'] = min(graph[u][v]['weight'], weight)
            else:
                graph.add_edge(u, v, weight=weight, corridors=[corridor.id])

    logger.debug(
        f"Corridor graph: {graph.number_of_nodes()} nodes, {graph.number_of_edges()} edges"
    )
    return graph


def nearest_node(graph: nx.Graph, x: float, y: float) -> Optional[Node]:
    """Waypoint closest to (x, y) by Manhattan distance, ties by node order."""
    best = None
    best_dist = None
    for node in sorted(graph.nodes):
        d = abs(node[0] - x) + abs(node[1] - y)
        if best_dist is None or d < best_dist:
            best, best_dist = node, d
    return best


def find_corridor_route(
    graph: nx.Graph,
    source: Tuple[float, float],
    target: Tuple[float, float],
) -> Optional[CorridorRoute]:
    """
    Shortest route between two (x, y) points over the corridor network.

    Each end is snapped to its nearest waypoint; the snap legs are
    reported as access_length.

    Returns:
        CorridorRoute, or None if the graph is empty or the snapped
        waypoints are not connected
    """
    start = nearest_node(graph, *source)
    end = nearest_node(graph, *target)
    if start is None or end is None:
        return None

    try:
        nodes = nx.shortest_path(graph, start, end, weight='weight')
    except (nx.NetworkXNoPath, nx.NodeNotFound):
        return None

    network_length = sum(
        graph[u][v]['weight'] for u, v in zip(nodes, nodes[1:])
    )
    access_length = (
        abs(start[0] - source[0]) + abs(start[1] - source[1]) +
        abs(end[0] - target[0]) + abs(end[1] - target[1])
    )
    return CorridorRoute(
        nodes=list(nodes),
        network_length=float(network_length),
        access_length=float(access_length),
    )


def get_network_components(graph: nx.Graph) -> List[Set[Node]]:
    """Connected components, largest first."""
    components = [set(c) for c in nx.connected_components(graph)]
    components.sort(key=lambda c: (-len(c), min(c)))
    return components
