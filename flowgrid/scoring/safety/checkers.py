"""
flowgrid/scoring/safety/checkers.py - Safety rule checkers

One checker per rule. Each returns the list of violations it finds on
the classified floor map; an empty list means the rule passes.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple
import logging

from flowgrid.core.config import DEFAULT_CONFIG, ScoringConfig
from flowgrid.core.enums import ActivityKind, CellType
from flowgrid.core.models import Zone
from flowgrid.core.snapshot import LayoutSnapshot
from flowgrid.geometry.cells import DIAGONALS, NEIGHBORS_4, FloorMap, WalkGraph, classify_cells
from flowgrid.geometry.corridors import door_cells
from flowgrid.geometry.grid import cell_label

from ..findings import SafetyFinding
from .rules import SafetyRule

__all__ = [
    'SafetyContext',
    'RuleChecker',
    'CrossingChecker',
    'SeparationChecker',
    'BlindCornerChecker',
    'ApproachSpeedChecker',
    'WorkAreaAccessChecker',
    'StagingAccessChecker',
    'EgressChecker',
    'get_checker',
]

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]

_WORK_ACCESS_TYPES = (CellType.PEDESTRIAN, CellType.EMPTY, CellType.WORK, CellType.DOOR)
_STAGING_ACCESS_TYPES = (CellType.PEDESTRIAN, CellType.EMPTY, CellType.STAGING)
_EGRESS_TYPES = (CellType.PEDESTRIAN, CellType.EMPTY, CellType.STAGING, CellType.WORK, CellType.DOOR)


def zone_anchor(zone: Zone) -> Cell:
    """Integer cell at a zone's centre, used as a walk endpoint."""
    return zone.grid_y + zone.grid_height // 2, zone.grid_x + zone.grid_width // 2


class SafetyContext:
    """Shared inputs for one safety evaluation."""

    def __init__(
        self,
        snapshot: LayoutSnapshot,
        config: Optional[ScoringConfig] = None,
        floor: Optional[FloorMap] = None,
    ):
        self.snapshot = snapshot
        self.config = config or DEFAULT_CONFIG
        self.floor = floor or classify_cells(snapshot)
        self._walk_graphs: Dict[FrozenSet[CellType], WalkGraph] = {}
        self._crossings: Optional[List[Cell]] = None

    @property
    def crossings(self) -> List[Cell]:
        if self._crossings is None:
            self._crossings = self.floor.crossing_cells()
        return self._crossings

    def walk_graph(self, walkable: Iterable[CellType]) -> WalkGraph:
        key = frozenset(walkable)
        if key not in self._walk_graphs:
            self._walk_graphs[key] = WalkGraph(self.floor, key)
        return self._walk_graphs[key]


# =============================================================================
# BASE CHECKER
# =============================================================================

class RuleChecker(ABC):
    """Abstract base class for safety rule checkers."""

    @property
    @abstractmethod
    def rule_id(self) -> str:
        """Id of the rule this checker evaluates."""
        pass

    @abstractmethod
    def check(self, rule: SafetyRule, context: SafetyContext) -> List[SafetyFinding]:
        """
        Evaluate a rule against the classified floor.

        Args:
            rule: Rule definition
            context: Snapshot, floor map and walk graphs

        Returns:
            One finding per violation location
        """
        pass

    def _create_finding(
        self,
        rule: SafetyRule,
        message: str,
        cells: Sequence[Cell],
    ) -> SafetyFinding:
        return SafetyFinding(
            rule_name=rule.name,
            severity=rule.severity,
            message=message,
            cells=tuple(cells),
            deduction=rule.deduction,
        )


# =============================================================================
# TRAFFIC RULES
# =============================================================================

class CrossingChecker(RuleChecker):
    """Pedestrian and forklift corridors covering the same cell."""

    rule_id = "crossing"

    def check(self, rule, context):
        return [
            self._create_finding(
                rule,
                f"Pedestrian and forklift paths intersect at {cell_label(*cell)}",
                [cell],
            )
            for cell in context.crossings
        ]


class SeparationChecker(RuleChecker):
    """
    Pedestrian cells sharing an edge with forklift cells.

    Edges into a crossing are left to the crossing rule.
    """

    rule_id = "separation"

    def check(self, rule, context):
        floor = context.floor
        crossings = set(context.crossings)
        findings = []

        for cell in floor.cells_of_type(CellType.PEDESTRIAN):
            for neighbor in floor.neighbors(*cell):
                if neighbor in crossings:
                    continue
                if floor.type_at(*neighbor) != CellType.EQUIPMENT:
                    continue
                findings.append(self._create_finding(
                    rule,
                    f"{cell_label(*cell)} (pedestrian) is adjacent to "
                    f"{cell_label(*neighbor)} (forklift) with no barrier",
                    [cell, neighbor],
                ))

        return findings


class BlindCornerChecker(RuleChecker):
    """Crossings with an obstacle on a diagonal."""

    rule_id = "blind-corner"

    def check(self, rule, context):
        floor = context.floor
        findings = []

        for row, col in context.crossings:
            for dr, dc in DIAGONALS:
                diagonal = (row + dr, col + dc)
                if not floor.dims.contains(*diagonal):
                    continue
                if floor.type_at(*diagonal) == CellType.OBSTACLE:
                    findings.append(self._create_finding(
                        rule,
                        f"Obstacle at {cell_label(*diagonal)} blocks line of sight "
                        f"at crossing {cell_label(row, col)}",
                        [(row, col), diagonal],
                    ))
                    break

        return findings


class ApproachSpeedChecker(RuleChecker):
    """Long straight runs of forklift cells leading into a crossing."""

    rule_id = "speed"

    _DIRECTION_NAMES = {
        (-1, 0): "from the north",
        (1, 0): "from the south",
        (0, -1): "from the west",
        (0, 1): "from the east",
    }

    def check(self, rule, context):
        floor = context.floor
        crossings = set(context.crossings)
        min_run = context.config.speed_run_cells
        findings = []

        for row, col in context.crossings:
            for dr, dc in NEIGHBORS_4:
                run = 0
                r, c = row + dr, col + dc
                while floor.type_at(r, c) == CellType.EQUIPMENT and (r, c) not in crossings:
                    run += 1
                    r += dr
                    c += dc

                if run >= min_run:
                    start = (row + dr, col + dc)
                    findings.append(self._create_finding(
                        rule,
                        f"{run}-square forklift approach into the crossing at "
                        f"{cell_label(row, col)} {self._DIRECTION_NAMES[(dr, dc)]}",
                        [(row, col), start],
                    ))

        return findings


# =============================================================================
# ACCESS AND EGRESS RULES
# =============================================================================

class WorkAreaAccessChecker(RuleChecker):
    """Each work area reachable on foot from some personnel door."""

    rule_id = "ped-access-work"

    def check(self, rule, context):
        snapshot = context.snapshot
        dims = snapshot.dimensions
        doors = [d for d in snapshot.doors if d.is_personnel]
        if not doors:
            return []

        graph = context.walk_graph(_WORK_ACCESS_TYPES)
        door_cell_list = [cell for d in doors for cell in door_cells(d, dims)]
        findings = []

        for zone, activity in snapshot.zones_of_kind(ActivityKind.WORK_AREA):
            anchor = zone_anchor(zone)
            if any(graph.is_reachable(cell, anchor) for cell in door_cell_list):
                continue
            findings.append(self._create_finding(
                rule,
                f"Workers must cross a forklift path to reach {activity.name}",
                [anchor],
            ))

        return findings


class StagingAccessChecker(RuleChecker):
    """Each pair of staging lanes connected on foot."""

    rule_id = "ped-access-staging"

    def check(self, rule, context):
        lanes = context.snapshot.zones_of_kind(ActivityKind.STAGING_LANE)
        graph = context.walk_graph(_STAGING_ACCESS_TYPES)
        findings = []

        for i, (zone_a, act_a) in enumerate(lanes):
            for zone_b, act_b in lanes[i + 1:]:
                a, b = zone_anchor(zone_a), zone_anchor(zone_b)
                if graph.is_reachable(a, b):
                    continue
                findings.append(self._create_finding(
                    rule,
                    f"No pedestrian walkway between {act_a.name} and {act_b.name}",
                    [a, b],
                ))

        return findings


class EgressChecker(RuleChecker):
    """Every zone reachable on foot from an emergency or personnel exit."""

    rule_id = "egress"

    def check(self, rule, context):
        snapshot = context.snapshot
        dims = snapshot.dimensions
        exits = [d for d in snapshot.doors if d.is_egress]
        if not exits:
            return []

        graph = context.walk_graph(_EGRESS_TYPES)
        exit_cells = [cell for d in exits for cell in door_cells(d, dims)]
        findings = []

        for zone in snapshot.zones:
            anchor = zone_anchor(zone)
            if any(graph.is_reachable(anchor, cell) for cell in exit_cells):
                continue
            activity = snapshot.activity(zone.activity_id)
            name = activity.name if activity else (zone.name or zone.id)
            findings.append(self._create_finding(
                rule,
                f"No safe pedestrian exit path from {name} without crossing a forklift path",
                [anchor],
            ))

        return findings


# =============================================================================
# CHECKER REGISTRY
# =============================================================================

_CHECKERS: Dict[str, RuleChecker] = {
    checker.rule_id: checker for checker in (
        CrossingChecker(),
        SeparationChecker(),
        BlindCornerChecker(),
        ApproachSpeedChecker(),
        WorkAreaAccessChecker(),
        StagingAccessChecker(),
        EgressChecker(),
    )
}


def get_checker(rule_id: str) -> Optional[RuleChecker]:
    """Get the checker for a rule id."""
    return _CHECKERS.get(rule_id)
