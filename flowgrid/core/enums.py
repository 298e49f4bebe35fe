"""
flowgrid/core/enums.py - Layout enumerations

Enumerations shared by the geometry, placement and scoring packages.
Values match the strings stored by the persistence layer.
"""

from enum import Enum


class CellKind(Enum):
    """Kinds of painted (fixed) grid cells."""
    PERMANENT = "permanent"      # Blocks zone placement
    SEMI_FIXED = "semi-fixed"    # Discouraged, never blocks


class ActivityKind(Enum):
    """Operational function types."""
    WORK_AREA = "work-area"
    STAGING_LANE = "staging-lane"
    CORRIDOR = "corridor"
    SUPPORT_AREA = "support-area"


class ClosenessRating(Enum):
    """Desired proximity between two activities."""
    MUST_BE_CLOSE = "must-be-close"
    PREFER_CLOSE = "prefer-close"
    KEEP_APART = "keep-apart"
    DOES_NOT_MATTER = "does-not-matter"


class CorridorKind(Enum):
    """Corridor traffic types."""
    PEDESTRIAN = "pedestrian"
    FORKLIFT = "forklift"


class DoorEdge(Enum):
    """Facility wall a door sits on."""
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


class DoorType(Enum):
    """Door types."""
    HANGAR = "hangar"
    LOADING_DOCK = "loading-dock"
    PERSONNEL = "personnel"
    EMERGENCY = "emergency"


class LabelAlign(Enum):
    """Zone label placement."""
    CENTER = "center"
    TOP_LEFT = "top-left"
    TOP = "top"
    BOTTOM = "bottom"


class CellType(Enum):
    """Classification of a grid cell for safety analysis."""
    PEDESTRIAN = "pedestrian"
    EQUIPMENT = "equipment"
    STAGING = "staging"
    WORK = "work"
    OBSTACLE = "obstacle"
    DOOR = "door"
    EMPTY = "empty"


class Severity(Enum):
    """Flag severity, ordered HIGH > MEDIUM > LOW."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        """Sort rank, 0 is most severe."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.HIGH: 0,
    Severity.MEDIUM: 1,
    Severity.LOW: 2,
}


class RuleStatus(Enum):
    """Outcome of a single safety rule."""
    PASS = "pass"
    PARTIAL = "partial"
    FAIL = "fail"
