"""
flowgrid/scoring/findings.py - Scoring findings

Structured detail records attached to score factors. Each variant has a
fixed `kind` tag; text is produced only at render time, so scorers
never build display strings for details.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, Optional, Tuple

from flowgrid.core.enums import ClosenessRating, Severity

__all__ = [
    'Finding',
    'ClosenessViolation',
    'SizeMismatch',
    'LaneSizing',
    'AreaShare',
    'UtilizationSummary',
    'SafetyFinding',
    'CorridorFinding',
    'DepartureFinding',
    'FlowRoute',
]


@dataclass(frozen=True)
class Finding:
    """Base class for factor details."""

    kind: ClassVar[str] = "finding"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, (ClosenessRating, Severity)):
                value = value.value
            elif isinstance(value, tuple):
                value = [list(v) if isinstance(v, tuple) else v for v in value]
            data[f.name] = value
        return data


# =============================================================================
# CLOSENESS
# =============================================================================

@dataclass(frozen=True)
class ClosenessViolation(Finding):
    """Placed pair whose centre distance misses its rating threshold."""

    kind: ClassVar[str] = "closeness-violation"

    activity_a_id: str
    activity_b_id: str
    activity_a_name: str
    activity_b_name: str
    rating: ClosenessRating
    distance: int
    threshold: int


# =============================================================================
# SPACE
# =============================================================================

@dataclass(frozen=True)
class SizeMismatch(Finding):
    """Staging lane whose share of space differs from its share of volume."""

    kind: ClassVar[str] = "size-mismatch"

    activity_id: str
    activity_name: str
    direction: str               # "undersized" or "oversized"
    space_percentage: float
    volume_percentage: float
    suggested_squares: int

    @property
    def difference(self) -> float:
        return self.space_percentage - self.volume_percentage


@dataclass(frozen=True)
class LaneSizing(Finding):
    """Suggested size for a staging lane."""

    kind: ClassVar[str] = "lane-sizing"

    activity_id: str
    activity_name: str
    volume_percentage: float
    suggested_squares: int
    suggested_width: int
    suggested_height: int
    current_squares: Optional[int] = None


@dataclass(frozen=True)
class AreaShare(Finding):
    """Share of the whole grid taken by a non-staging activity."""

    kind: ClassVar[str] = "area-share"

    activity_id: str
    activity_name: str
    zone_area: int
    percentage: float


@dataclass(frozen=True)
class UtilizationSummary(Finding):
    """Assigned zone area against available floor."""

    kind: ClassVar[str] = "utilization"

    used_squares: int
    available_squares: int
    percentage: float


# =============================================================================
# SAFETY AND CORRIDORS
# =============================================================================

@dataclass(frozen=True)
class SafetyFinding(Finding):
    """One location where a safety rule is violated."""

    kind: ClassVar[str] = "safety"

    rule_name: str
    severity: Severity
    message: str
    cells: Tuple[Tuple[int, int], ...] = field(default_factory=tuple)
    deduction: int = 0


@dataclass(frozen=True)
class CorridorFinding(Finding):
    """Corridor adequacy issue or network observation."""

    kind: ClassVar[str] = "corridor"

    issue: str                   # "narrow", "no-forklift-access", "network"
    subject_id: str
    subject_name: str
    value: float = 0.0


# =============================================================================
# FLOW
# =============================================================================

@dataclass(frozen=True)
class DepartureFinding(Finding):
    """A timed staging lane and its distance to the nearest exit door."""

    kind: ClassVar[str] = "departure"

    activity_id: str
    activity_name: str
    departure_time: str
    distance_to_exit: float
    out_of_order: bool = False


@dataclass(frozen=True)
class FlowRoute(Finding):
    """Forklift route from an inbound door to a work area."""

    kind: ClassVar[str] = "flow-route"

    door_id: str
    activity_id: str
    activity_name: str
    route_length: float
