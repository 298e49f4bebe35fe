"""
flowgrid/scoring/rendering.py - Presentation helpers

Turns structured findings into display strings and resolves flag
dismissal against the user's dismissed-id set. Nothing here feeds back
into a score.
"""

from __future__ import annotations
from dataclasses import replace
from typing import AbstractSet, Callable, Dict, List

from flowgrid.core.enums import ClosenessRating
from flowgrid.geometry.grid import cell_label, round_half_up

from .factors import Flag, LayoutScore, ScoreFactor
from .findings import (
    AreaShare,
    ClosenessViolation,
    CorridorFinding,
    DepartureFinding,
    Finding,
    FlowRoute,
    LaneSizing,
    SafetyFinding,
    SizeMismatch,
    UtilizationSummary,
)

__all__ = [
    'render_finding',
    'render_details',
    'resolve_flags',
    'active_flags',
    'sort_flags',
]


# =============================================================================
# FINDINGS
# =============================================================================

def _closeness(f: ClosenessViolation) -> str:
    if f.rating == ClosenessRating.KEEP_APART:
        return (
            f"{f.activity_a_name} and {f.activity_b_name} should be kept apart "
            f"(only {f.distance} squares apart, need {f.threshold}+)"
        )
    phrase = "must be close" if f.rating == ClosenessRating.MUST_BE_CLOSE else "prefer close"
    return (
        f"{f.activity_a_name} and {f.activity_b_name} {phrase} "
        f"({f.distance} squares apart, limit {f.threshold})"
    )


def _size_mismatch(f: SizeMismatch) -> str:
    return (
        f"{f.activity_name} is {f.direction} for its volume "
        f"({round_half_up(f.space_percentage)}% of space, "
        f"{round_half_up(f.volume_percentage)}% of volume)"
    )


def _lane_sizing(f: LaneSizing) -> str:
    text = (
        f"{f.activity_name}: {round_half_up(f.volume_percentage)}% of volume, "
        f"suggest {f.suggested_squares} squares "
        f"({f.suggested_width} x {f.suggested_height})"
    )
    if f.current_squares is not None:
        text += f", currently {f.current_squares}"
    return text


def _area_share(f: AreaShare) -> str:
    return f"{f.activity_name}: {f.zone_area} squares ({round_half_up(f.percentage)}% of floor)"


def _utilization(f: UtilizationSummary) -> str:
    return (
        f"{f.used_squares} of {f.available_squares} available squares assigned "
        f"({round_half_up(f.percentage)}%)"
    )


def _safety(f: SafetyFinding) -> str:
    where = ", ".join(cell_label(*c) for c in f.cells)
    return f"[{f.severity.value}] {f.message}" + (f" ({where})" if where else "")


def _corridor(f: CorridorFinding) -> str:
    if f.issue == "narrow":
        return f"{f.subject_name} is only {int(f.value)} square(s) wide"
    if f.issue == "no-forklift-access":
        return f"{f.subject_name} has no forklift corridor connected"
    if f.issue == "network":
        return f"Forklift corridors form {int(f.value)} disconnected networks"
    return f"{f.subject_name}: {f.issue}"


def _departure(f: DepartureFinding) -> str:
    mark = "out of order" if f.out_of_order else "ok"
    return (
        f"{f.activity_name} (departs {f.departure_time}): "
        f"{round_half_up(f.distance_to_exit)} squares from nearest exit, {mark}"
    )


def _flow_route(f: FlowRoute) -> str:
    return f"Door {f.door_id} to {f.activity_name}: {round_half_up(f.route_length)} squares by forklift"


_RENDERERS: Dict[str, Callable] = {
    ClosenessViolation.kind: _closeness,
    SizeMismatch.kind: _size_mismatch,
    LaneSizing.kind: _lane_sizing,
    AreaShare.kind: _area_share,
    UtilizationSummary.kind: _utilization,
    SafetyFinding.kind: _safety,
    CorridorFinding.kind: _corridor,
    DepartureFinding.kind: _departure,
    FlowRoute.kind: _flow_route,
}


def render_finding(finding: Finding) -> str:
    """Display string for one finding."""
    renderer = _RENDERERS.get(finding.kind)
    if renderer is None:
        return str(finding)
    return renderer(finding)


def render_details(factor: ScoreFactor) -> List[str]:
    return [render_finding(d) for d in factor.details]


# =============================================================================
# FLAGS
# =============================================================================

def sort_flags(flags: List[Flag]) -> List[Flag]:
    """HIGH before MEDIUM before LOW, stable within a severity."""
    return sorted(flags, key=lambda f: f.severity.rank)


def resolve_flags(score: LayoutScore, dismissed: AbstractSet[str]) -> List[Flag]:
    """All pooled flags with is_dismissed resolved, most severe first."""
    return sort_flags([
        replace(flag, is_dismissed=flag.id in dismissed)
        for flag in score.flags
    ])


def active_flags(score: LayoutScore, dismissed: AbstractSet[str]) -> List[Flag]:
    """Flags the user has not dismissed."""
    return [f for f in resolve_flags(score, dismissed) if not f.is_dismissed]
