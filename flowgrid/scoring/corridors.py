"""
flowgrid/scoring/corridors.py - Path clearance scoring

Checks that forklift corridors are wide enough and that every placed
staging lane is reached by one. Deductions always apply; a dismissed
flag is only hidden.
"""

from __future__ import annotations
from typing import List, Optional
import logging

from flowgrid.core.config import DEFAULT_CONFIG, ScoringConfig
from flowgrid.core.enums import ActivityKind, CorridorKind, Severity
from flowgrid.core.snapshot import LayoutSnapshot
from flowgrid.geometry.corridors import (
    build_corridor_graph,
    corridor_touches_rect,
    get_network_components,
)

from .factors import Flag, ScoreFactor
from .findings import CorridorFinding

__all__ = ['PathClearanceScorer']

logger = logging.getLogger(__name__)

NARROW_DEDUCTION = 2
NO_FORKLIFT_DEDUCTION = 1


class PathClearanceScorer:
    """Corridor adequacy factor."""

    NAME = "path_clearance"
    LABEL = "Path Clearance: Are corridors wide enough and connected?"

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def score(self, snapshot: LayoutSnapshot) -> ScoreFactor:
        max_score = self.config.budget(self.NAME)
        square_size = snapshot.settings.square_size
        min_width = self.config.min_forklift_width
        forklifts = [c for c in snapshot.corridors if c.is_forklift]

        details: List[CorridorFinding] = []
        flags: List[Flag] = []

        for corridor in forklifts:
            if corridor.width >= min_width:
                continue
            details.append(CorridorFinding(
                issue="narrow",
                subject_id=corridor.id,
                subject_name=corridor.name or corridor.id,
                value=float(corridor.width),
            ))
            flags.append(Flag(
                id=f"path-narrow-corridor-{corridor.id}",
                severity=Severity.MEDIUM,
                message=(
                    f"Forklift path is only {corridor.width} square wide "
                    f"({corridor.width * square_size:g} units)"
                ),
                recommendation=(
                    f"Minimum for forklift traffic is {min_width} squares. "
                    "Widen this corridor if forklifts will use it."
                ),
                points_deduction=NARROW_DEDUCTION,
            ))

        for zone, activity in snapshot.zones_of_kind(ActivityKind.STAGING_LANE):
            if any(corridor_touches_rect(c, zone.rect) for c in forklifts):
                continue
            details.append(CorridorFinding(
                issue="no-forklift-access",
                subject_id=zone.id,
                subject_name=activity.name,
            ))
            flags.append(Flag(
                id=f"path-no-forklift-{zone.id}",
                severity=Severity.LOW,
                message=f"{activity.name} has no forklift corridor connected",
                recommendation=(
                    "If cargo moves here by forklift, add a forklift corridor. "
                    "If it moves by hand cart or pallet jack, a pedestrian walkway "
                    "is sufficient and this can be dismissed."
                ),
                points_deduction=NO_FORKLIFT_DEDUCTION,
            ))

        graph = build_corridor_graph(forklifts, kinds=[CorridorKind.FORKLIFT])
        components = get_network_components(graph)
        if len(components) > 1:
            details.append(CorridorFinding(
                issue="network",
                subject_id="forklift",
                subject_name="Forklift network",
                value=float(len(components)),
            ))

        flags.sort(key=lambda f: f.severity.rank)
        score = max(0, max_score - sum(f.points_deduction for f in flags))

        logger.debug(f"Path clearance: {len(flags)} issue(s), score {score}/{max_score}")
        return ScoreFactor(
            name=self.NAME,
            label=self.LABEL,
            score=score,
            max_score=max_score,
            display=f"{len(flags)} clearance issue(s)" if flags else "All paths are clear",
            details=details,
            flags=flags,
            suggestion=(
                "Review corridor widths and connections (dismiss if they don't apply)"
                if flags else "Path clearance is good"
            ),
        )
