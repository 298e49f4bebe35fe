"""
Unit tests for corridor geometry and path clearance.

Covers geometry/corridors.py (cell coverage, door cells, corridor
graph routing) and scoring/corridors.py (PathClearanceScorer).
"""

import pytest

from flowgrid.core.enums import ActivityKind, CorridorKind, DoorEdge, Severity
from flowgrid.core.models import Corridor, Door, Point
from flowgrid.geometry.corridors import (
    build_corridor_graph,
    corridor_cells,
    corridor_touches_rect,
    door_cells,
    find_corridor_route,
    get_network_components,
    segment_cells,
)
from flowgrid.geometry.grid import GridDimensions, Rect
from flowgrid.scoring.corridors import PathClearanceScorer
from flowgrid.scoring.findings import CorridorFinding


FORK = CorridorKind.FORKLIFT
PED = CorridorKind.PEDESTRIAN


# =============================================================================
# CELL COVERAGE
# =============================================================================

class TestSegmentCells:
    """Test corridor cell coverage."""

    def test_horizontal_widens_down(self):
        cells = segment_cells(Point(1, 3), Point(4, 3), width=2)
        assert len(cells) == 8
        assert (3, 1) in cells
        assert (4, 4) in cells
        assert (5, 1) not in cells

    def test_vertical_widens_right(self):
        cells = segment_cells(Point(2, 5), Point(2, 1), width=2)
        assert len(cells) == 10
        assert (1, 3) in cells
        assert (5, 2) in cells

    def test_diagonal_walked_as_l(self):
        cells = segment_cells(Point(0, 0), Point(2, 2), width=1)
        assert cells == {(0, 0), (0, 1), (0, 2), (1, 2), (2, 2)}

    def test_multi_segment_corridor(self, make_corridor):
        corridor = make_corridor("c", PED, [(0, 0), (3, 0), (3, 4)])
        cells = corridor_cells(corridor)
        assert len(cells) == 8
        assert corridor.length() == 7

    def test_legacy_start_end(self):
        corridor = Corridor(
            id="old",
            kind=PED,
            start_grid_x=0,
            start_grid_y=2,
            end_grid_x=4,
            end_grid_y=2,
        )
        assert corridor_cells(corridor) == {(2, c) for c in range(5)}
        assert corridor.length() == 4

    def test_clipped_to_grid(self, make_corridor):
        corridor = make_corridor("c", FORK, [(0, 9), (4, 9)], width=2)
        assert len(corridor_cells(corridor)) == 10
        assert len(corridor_cells(corridor, GridDimensions(rows=10, cols=10))) == 5

    def test_touches_rect(self, make_corridor):
        corridor = make_corridor("c", FORK, [(0, 5), (9, 5)])
        assert corridor_touches_rect(corridor, Rect(3, 4, 2, 2))
        assert not corridor_touches_rect(corridor, Rect(3, 0, 2, 2))


class TestDoorCells:
    """Test door wall coverage."""

    def test_top_door_runs_along_row(self):
        door = Door(id="d", width=3, grid_x=2, grid_y=0, edge=DoorEdge.TOP)
        assert door_cells(door) == [(0, 2), (0, 3), (0, 4)]

    def test_left_door_runs_down_column(self):
        door = Door(id="d", width=3, grid_x=0, grid_y=2, edge=DoorEdge.LEFT)
        assert door_cells(door) == [(2, 0), (3, 0), (4, 0)]

    def test_clipped_to_grid(self):
        door = Door(id="d", width=4, grid_x=8, grid_y=9, edge=DoorEdge.BOTTOM)
        assert door_cells(door, GridDimensions(rows=10, cols=10)) == [(9, 8), (9, 9)]


# =============================================================================
# CORRIDOR GRAPH
# =============================================================================

class TestCorridorGraph:
    """Test the waypoint graph and routing."""

    @pytest.fixture
    def network(self, make_corridor):
        return [
            make_corridor("c1", FORK, [(0, 0), (3, 0)]),
            make_corridor("c2", FORK, [(3, 0), (3, 4)]),
            make_corridor("c3", FORK, [(8, 8), (9, 8)]),
            make_corridor("walk", PED, [(0, 0), (0, 9)]),
        ]

    def test_shared_waypoints_join(self, network):
        graph = build_corridor_graph(network, kinds=[FORK])
        assert graph.has_edge((0, 0), (3, 0))
        assert graph.has_edge((3, 0), (3, 4))
        assert not graph.has_node((0, 9))
        assert graph[(3, 0)][(3, 4)]["weight"] == 4
        assert graph[(3, 0)][(3, 4)]["corridors"] == ["c2"]

    def test_route(self, network):
        graph = build_corridor_graph(network, kinds=[FORK])
        route = find_corridor_route(graph, (0, 0), (3, 4))
        assert route.nodes == [(0, 0), (3, 0), (3, 4)]
        assert route.network_length == 7.0
        assert route.access_length == 0.0

    def test_route_access_legs(self, network):
        graph = build_corridor_graph(network, kinds=[FORK])
        route = find_corridor_route(graph, (0, 1), (4, 4))
        assert route.network_length == 7.0
        assert route.access_length == 2.0
        assert route.total_length == 9.0

    def test_disconnected_route(self, network):
        graph = build_corridor_graph(network, kinds=[FORK])
        assert find_corridor_route(graph, (0, 0), (9, 8)) is None

    def test_empty_graph(self):
        assert find_corridor_route(build_corridor_graph([]), (0, 0), (1, 1)) is None

    def test_components_largest_first(self, network):
        components = get_network_components(build_corridor_graph(network, kinds=[FORK]))
        assert len(components) == 2
        assert components[0] == {(0, 0), (3, 0), (3, 4)}

    def test_all_kinds(self, network):
        graph = build_corridor_graph(network)
        assert graph.has_edge((0, 0), (0, 9))
        assert len(get_network_components(graph)) == 2


# =============================================================================
# PATH CLEARANCE
# =============================================================================

class TestPathClearanceScorer:
    """Test the path_clearance factor."""

    def test_no_corridors_full_score(self, build_snapshot):
        factor = PathClearanceScorer().score(build_snapshot())
        assert factor.score == factor.max_score == 15
        assert factor.display == "All paths are clear"

    def test_narrow_forklift_corridor(self, build_snapshot, make_corridor):
        snapshot = build_snapshot(corridors=[
            make_corridor("f1", FORK, [(0, 5), (9, 5)], width=1, name="Main aisle"),
            make_corridor("f2", FORK, [(0, 0), (9, 0)], width=2),
            make_corridor("p1", PED, [(0, 8), (9, 8)], width=1),
        ])
        factor = PathClearanceScorer().score(snapshot)

        assert factor.score == 13
        assert [f.id for f in factor.flags] == ["path-narrow-corridor-f1"]
        assert factor.flags[0].severity == Severity.MEDIUM
        assert factor.details[0].subject_name == "Main aisle"

    def test_staging_lane_without_forklift(self, build_snapshot, make_activity, make_zone, make_corridor):
        snapshot = build_snapshot(
            activities=[
                make_activity("s1", ActivityKind.STAGING_LANE),
                make_activity("s2", ActivityKind.STAGING_LANE),
            ],
            zones=[
                make_zone("z1", 0, 4, 2, 2, activity_id="s1"),
                make_zone("z2", 6, 0, 2, 2, activity_id="s2"),
            ],
            corridors=[make_corridor("f1", FORK, [(0, 5), (9, 5)], width=2)],
        )
        factor = PathClearanceScorer().score(snapshot)

        assert factor.score == 14
        assert [f.id for f in factor.flags] == ["path-no-forklift-z2"]
        assert factor.flags[0].severity == Severity.LOW

    def test_flags_sorted_by_severity(self, build_snapshot, make_activity, make_zone, make_corridor):
        snapshot = build_snapshot(
            activities=[make_activity("s1", ActivityKind.STAGING_LANE)],
            zones=[make_zone("z1", 0, 0, 2, 2, activity_id="s1")],
            corridors=[make_corridor("f1", FORK, [(0, 5), (9, 5)], width=1)],
        )
        factor = PathClearanceScorer().score(snapshot)
        assert [f.severity for f in factor.flags] == [Severity.MEDIUM, Severity.LOW]
        assert factor.score == 12

    def test_disconnected_network_reported(self, build_snapshot, make_corridor):
        snapshot = build_snapshot(corridors=[
            make_corridor("f1", FORK, [(0, 0), (4, 0)], width=2),
            make_corridor("f2", FORK, [(0, 7), (4, 7)], width=2),
        ])
        factor = PathClearanceScorer().score(snapshot)
        network = [d for d in factor.details if isinstance(d, CorridorFinding) and d.issue == "network"]
        assert network[0].value == 2.0
        assert factor.score == 15

    def test_dismissal_does_not_restore_points(self, build_snapshot, make_corridor):
        corridors = [make_corridor("f1", FORK, [(0, 5), (9, 5)], width=1)]
        plain = PathClearanceScorer().score(build_snapshot(corridors=corridors))
        dismissed = PathClearanceScorer().score(build_snapshot(
            corridors=corridors,
            dismissed_flags={"path-narrow-corridor-f1"},
        ))
        assert plain.score == dismissed.score == 13
