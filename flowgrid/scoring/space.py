"""
flowgrid/scoring/space.py - Space utilization and staging lane sizing

Two factors come from here:

    space_utilization   assigned zone area against available floor
    buffer_capacity     staging lane area shares against volume shares

The sizing helpers (suggested_squares, suggested_rect) are also used
interactively when a user draws a new staging lane.
"""

from __future__ import annotations
from typing import List, Optional, Tuple
import logging
import math

from flowgrid.core.config import DEFAULT_CONFIG, ScoringConfig
from flowgrid.core.enums import ActivityKind, Severity
from flowgrid.core.snapshot import LayoutSnapshot
from flowgrid.core.volumes import volume_percentage, volume_share_by_activity
from flowgrid.geometry.grid import round_half_up

from .factors import Flag, ScoreFactor
from .findings import AreaShare, LaneSizing, SizeMismatch, UtilizationSummary

__all__ = [
    'available_squares',
    'staging_budget',
    'suggested_squares',
    'suggested_rect',
    'evaluate_lane_fit',
    'SpaceUtilizationScorer',
]

logger = logging.getLogger(__name__)


# =============================================================================
# SIZING HELPERS
# =============================================================================

def available_squares(snapshot: LayoutSnapshot) -> int:
    """Grid squares minus painted cells (both kinds) minus door widths."""
    dims = snapshot.dimensions
    painted = len(snapshot.painted_squares)
    door_width = sum(d.width for d in snapshot.doors)
    return dims.total_squares - painted - door_width


def staging_budget(available: int, fraction: float = 0.6) -> int:
    """Squares set aside for staging lanes."""
    return max(0, math.floor(available * fraction))


def suggested_squares(budget: int, volume_pct: float) -> int:
    """Lane size proportional to its volume share."""
    return round_half_up(budget * volume_pct / 100.0)


def suggested_rect(
    squares: int,
    target_ratio: float = 1.3,
    min_dimension: int = 2,
) -> Tuple[int, int]:
    """
    Width and height for a lane of about `squares` cells.

    Starts from the rectangle nearest the target width:height ratio and
    grows one side at a time, whichever keeps the ratio closer to the
    target, until it is within 2 cells of the requested size. A lane
    with no squares to size gets a 3x3 placeholder.

    Returns:
        (width, height)
    """
    if squares <= 0:
        return 3, 3
    height = max(min_dimension, round_half_up(math.sqrt(squares / target_ratio)))
    width = max(min_dimension, round_half_up(squares / height))

    while width * height < squares - 2:
        wider = abs((width + 1) / height - target_ratio)
        taller = abs(width / (height + 1) - target_ratio)
        if wider <= taller:
            width += 1
        else:
            height += 1

    return width, height


def evaluate_lane_fit(
    snapshot: LayoutSnapshot,
    tolerance_pct: float = 10.0,
    budget: int = 0,
) -> Tuple[List[SizeMismatch], int]:
    """
    Compare each placed staging lane's share of staging area with its
    share of volume.

    Returns:
        (mismatches, evaluated_lane_count)
    """
    lanes = snapshot.zones_of_kind(ActivityKind.STAGING_LANE)
    total_area = sum(zone.area for zone, _ in lanes)
    shares = volume_share_by_activity(snapshot.volumes)

    mismatches = []
    for zone, activity in lanes:
        space_pct = zone.area / total_area * 100.0 if total_area > 0 else 0.0
        volume_pct = volume_percentage(shares, activity.id)
        diff = space_pct - volume_pct
        if abs(diff) <= tolerance_pct:
            continue
        mismatches.append(SizeMismatch(
            activity_id=activity.id,
            activity_name=activity.name,
            direction="undersized" if diff < 0 else "oversized",
            space_percentage=space_pct,
            volume_percentage=volume_pct,
            suggested_squares=suggested_squares(budget, volume_pct),
        ))

    return mismatches, len(lanes)


# =============================================================================
# SCORER
# =============================================================================

class SpaceUtilizationScorer:
    """Produces the space_utilization and buffer_capacity factors."""

    UTILIZATION = "space_utilization"
    UTILIZATION_LABEL = "Space Utilization: Is available space well used?"
    BUFFER = "buffer_capacity"
    BUFFER_LABEL = "Buffer Capacity: Can staging lanes handle peak volume?"

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def lane_sizing(self, snapshot: LayoutSnapshot) -> List[LaneSizing]:
        """Suggested size for every staging lane activity."""
        budget = staging_budget(available_squares(snapshot), self.config.staging_fraction)
        shares = volume_share_by_activity(snapshot.volumes)

        result = []
        for activity in snapshot.activities:
            if not activity.is_staging_lane:
                continue
            pct = volume_percentage(shares, activity.id)
            squares = suggested_squares(budget, pct)
            width, height = suggested_rect(
                squares, self.config.target_aspect_ratio, self.config.min_lane_dimension
            )
            zone = snapshot.zone_for(activity.id)
            result.append(LaneSizing(
                activity_id=activity.id,
                activity_name=activity.name,
                volume_percentage=pct,
                suggested_squares=squares,
                suggested_width=width,
                suggested_height=height,
                current_squares=zone.area if zone else None,
            ))
        return result

    # -------------------------------------------------------------------------
    # space_utilization
    # -------------------------------------------------------------------------

    def utilization_band(self, percentage: float) -> int:
        """Points for a utilization percentage, scaled to the budget."""
        max_score = self.config.budget(self.UTILIZATION)
        if percentage < 40:
            points = 5
        elif percentage < 60:
            points = 10
        elif percentage < 80:
            points = 13
        elif percentage > 95:
            points = 10
        else:
            points = 15
        return round_half_up(max_score * points / 15)

    def score_utilization(self, snapshot: LayoutSnapshot) -> ScoreFactor:
        available = available_squares(snapshot)
        used = sum(z.area for z in snapshot.zones if z.is_assigned)
        pct = used / available * 100.0 if available > 0 else 0.0

        details = [UtilizationSummary(used_squares=used, available_squares=available, percentage=pct)]
        total = snapshot.dimensions.total_squares
        for zone in snapshot.zones:
            activity = snapshot.activity(zone.activity_id)
            if activity is None or activity.is_staging_lane:
                continue
            details.append(AreaShare(
                activity_id=activity.id,
                activity_name=activity.name,
                zone_area=zone.area,
                percentage=zone.area / total * 100.0 if total > 0 else 0.0,
            ))

        if pct < 60:
            suggestion = "Assign more work areas and staging lanes"
        elif pct > 95:
            suggestion = "Consider if space is too cramped"
        else:
            suggestion = "Space utilization is balanced"

        return ScoreFactor(
            name=self.UTILIZATION,
            label=self.UTILIZATION_LABEL,
            score=self.utilization_band(pct),
            max_score=self.config.budget(self.UTILIZATION),
            display=f"{round_half_up(pct)}% of available space assigned",
            details=details,
            suggestion=suggestion,
        )

    # -------------------------------------------------------------------------
    # buffer_capacity
    # -------------------------------------------------------------------------

    def score_buffer(self, snapshot: LayoutSnapshot) -> ScoreFactor:
        max_score = self.config.budget(self.BUFFER)
        budget = staging_budget(available_squares(snapshot), self.config.staging_fraction)
        mismatches, evaluated = evaluate_lane_fit(
            snapshot, self.config.size_mismatch_tolerance_pct, budget
        )

        if evaluated == 0:
            return ScoreFactor(
                name=self.BUFFER,
                label=self.BUFFER_LABEL,
                score=max_score,
                max_score=max_score,
                display="No staging lanes placed",
                details=list(self.lane_sizing(snapshot)),
                suggestion="Place staging lanes to evaluate capacity",
            )

        fitting = evaluated - len(mismatches)
        score = round_half_up(max_score * fitting / evaluated)
        per_lane = round_half_up(max_score / evaluated)

        flags = []
        for m in mismatches:
            undersized = m.direction == "undersized"
            flags.append(Flag(
                id=f"space-{m.direction}-{m.activity_id}",
                severity=Severity.MEDIUM if undersized else Severity.LOW,
                message=(
                    f"{m.activity_name} is {m.direction} for its volume "
                    f"({round_half_up(m.space_percentage)}% of space, "
                    f"{round_half_up(m.volume_percentage)}% of volume)"
                ),
                recommendation=(
                    f"Resize this lane toward {m.suggested_squares} squares."
                ),
                points_deduction=per_lane,
            ))

        logger.debug(f"Buffer capacity: {fitting}/{evaluated} lanes fit their volume share")
        return ScoreFactor(
            name=self.BUFFER,
            label=self.BUFFER_LABEL,
            score=score,
            max_score=max_score,
            display=(
                f"{len(mismatches)} capacity issue(s)" if mismatches
                else "Buffer capacity is adequate"
            ),
            details=[*mismatches, *self.lane_sizing(snapshot)],
            flags=flags,
            suggestion=(
                "Resize staging lanes to match volume proportions" if mismatches
                else "Buffer capacity is well sized"
            ),
        )

    def score(self, snapshot: LayoutSnapshot) -> List[ScoreFactor]:
        return [self.score_utilization(snapshot), self.score_buffer(snapshot)]
