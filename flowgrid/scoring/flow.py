"""
flowgrid/scoring/flow.py - Material flow factors

flow_distance       are enough work areas placed, and how far forklifts
                    travel from inbound doors to them
departure_priority  are early-departure staging lanes nearest the exits
"""

from __future__ import annotations
from typing import List, Optional, Tuple
import logging

from flowgrid.core.config import DEFAULT_CONFIG, ScoringConfig
from flowgrid.core.enums import ActivityKind, CorridorKind, Severity
from flowgrid.core.models import Door, Zone
from flowgrid.core.snapshot import LayoutSnapshot
from flowgrid.geometry.corridors import build_corridor_graph, find_corridor_route
from flowgrid.geometry.grid import manhattan, round_half_up

from .factors import Flag, ScoreFactor
from .findings import DepartureFinding, FlowRoute

__all__ = [
    'FlowDistanceScorer',
    'DeparturePriorityScorer',
]

logger = logging.getLogger(__name__)

OUT_OF_ORDER_DEDUCTION = 2
NO_EXIT_POINTS = 10


def _zone_center_xy(zone: Zone) -> Tuple[float, float]:
    return zone.grid_x + zone.grid_width / 2, zone.grid_y + zone.grid_height / 2


# =============================================================================
# FLOW DISTANCE
# =============================================================================

class FlowDistanceScorer:
    """Work area coverage and inbound forklift routes."""

    NAME = "flow_distance"
    LABEL = "Flow Distance: How far does material travel?"
    BASE_POINTS = 15

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def routes(self, snapshot: LayoutSnapshot) -> List[FlowRoute]:
        """Forklift routes from each inbound door to each placed work area."""
        graph = build_corridor_graph(snapshot.corridors, kinds=[CorridorKind.FORKLIFT])
        if graph.number_of_nodes() == 0:
            return []

        routes = []
        for door in snapshot.doors:
            if not door.has_inbound_material:
                continue
            for zone, activity in snapshot.zones_of_kind(ActivityKind.WORK_AREA):
                route = find_corridor_route(graph, (door.grid_x, door.grid_y), _zone_center_xy(zone))
                if route is None:
                    continue
                routes.append(FlowRoute(
                    door_id=door.id,
                    activity_id=activity.id,
                    activity_name=activity.name,
                    route_length=route.total_length,
                ))
        return routes

    def score(self, snapshot: LayoutSnapshot) -> ScoreFactor:
        max_score = self.config.budget(self.NAME)
        work = snapshot.zones_of_kind(ActivityKind.WORK_AREA)
        staging = snapshot.zones_of_kind(ActivityKind.STAGING_LANE)

        if len(work) < 2:
            return ScoreFactor(
                name=self.NAME,
                label=self.LABEL,
                score=0,
                max_score=max_score,
                display="Insufficient work areas placed",
                suggestion="Place at least 2 work area zones",
            )

        score = min(max_score, self.BASE_POINTS + len(staging))
        return ScoreFactor(
            name=self.NAME,
            label=self.LABEL,
            score=score,
            max_score=max_score,
            display=f"{len(work)} work areas, {len(staging)} staging lanes",
            details=list(self.routes(snapshot)),
            suggestion=(
                "Optimize zone placement to minimize travel distance" if score < max_score
                else "Flow distance is well optimized"
            ),
        )


# =============================================================================
# DEPARTURE PRIORITY
# =============================================================================

class DeparturePriorityScorer:
    """Earlier departures should stage nearer the exit doors."""

    NAME = "departure_priority"
    LABEL = "Departure Priority: Are early-departure lanes near exits?"

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or DEFAULT_CONFIG

    @staticmethod
    def distance_to_exit(zone: Zone, exits: List[Door]) -> float:
        """Manhattan distance from zone centre to the nearest exit door."""
        center = _zone_center_xy(zone)
        return min(manhattan((d.grid_x, d.grid_y), center) for d in exits)

    def score(self, snapshot: LayoutSnapshot) -> ScoreFactor:
        max_score = self.config.budget(self.NAME)
        timed = [
            (zone, activity)
            for zone, activity in snapshot.zones_of_kind(ActivityKind.STAGING_LANE)
            if activity.departure_time
        ]

        if len(timed) < 2:
            return ScoreFactor(
                name=self.NAME,
                label=self.LABEL,
                score=max_score,
                max_score=max_score,
                display="Not enough staging lanes with departure times",
                suggestion="Set departure times on staging lanes",
            )

        exits = [d for d in snapshot.doors if d.is_exit]
        if not exits:
            return ScoreFactor(
                name=self.NAME,
                label=self.LABEL,
                score=round_half_up(max_score * NO_EXIT_POINTS / 15),
                max_score=max_score,
                display="No exit doors configured",
                suggestion="Mark doors with outbound material or vehicle access",
            )

        timed.sort(key=lambda za: (za[1].departure_time, za[1].id))
        distances = [self.distance_to_exit(zone, exits) for zone, _ in timed]
        slack = self.config.departure_slack_cells

        out_of_order = set()
        flags = []
        for i in range(len(timed) - 1):
            if distances[i] <= distances[i + 1] + slack:
                continue
            earlier, later = timed[i][1], timed[i + 1][1]
            out_of_order.add(i)
            flags.append(Flag(
                id=f"departure-order-{earlier.id}-{later.id}",
                severity=Severity.MEDIUM,
                message=(
                    f"{earlier.name} (departs {earlier.departure_time}) is "
                    f"{round_half_up(distances[i])} squares from an exit, but "
                    f"{later.name} (departs {later.departure_time}) is only "
                    f"{round_half_up(distances[i + 1])} squares away"
                ),
                recommendation="Swap their positions.",
                points_deduction=OUT_OF_ORDER_DEDUCTION,
            ))

        details = [
            DepartureFinding(
                activity_id=activity.id,
                activity_name=activity.name,
                departure_time=activity.departure_time,
                distance_to_exit=distances[i],
                out_of_order=i in out_of_order,
            )
            for i, (_, activity) in enumerate(timed)
        ]

        score = max(0, max_score - OUT_OF_ORDER_DEDUCTION * len(flags))
        return ScoreFactor(
            name=self.NAME,
            label=self.LABEL,
            score=score,
            max_score=max_score,
            display=(
                f"{len(flags)} positioning issue(s)" if flags
                else "Departure sequence is optimized"
            ),
            details=details,
            flags=flags,
            suggestion=(
                "Reposition staging lanes so earlier departures are closer to exits" if flags
                else "Early-departure lanes are well positioned near exits"
            ),
        )
