"""
flowgrid/core - Layout data model

Enumerations, entity records, scoring configuration, relationship and
volume helpers, and the immutable snapshot handed to the scorers.

The mutable container lives in flowgrid.core.state and is imported from
there directly, since it depends on the placement and scoring packages.
"""

from .enums import (
    CellKind,
    ActivityKind,
    ClosenessRating,
    CorridorKind,
    DoorEdge,
    DoorType,
    LabelAlign,
    CellType,
    Severity,
    RuleStatus,
)

from .models import (
    VALID_ROTATIONS,
    GridSettings,
    PaintedSquare,
    Activity,
    ActivityRelationship,
    VolumeTiming,
    Zone,
    PlacedObject,
    Door,
    Point,
    Corridor,
)

from .config import (
    DEFAULT_FACTOR_BUDGETS,
    ScoringConfig,
    DEFAULT_CONFIG,
)

from .relationships import (
    pair_key,
    RelationshipIndex,
    scorable_pairs,
    rating_progress,
    suggest_rating,
    apply_sequence_suggestions,
)

from .volumes import (
    recompute_volume_percentages,
    volume_share_by_activity,
    volume_percentage,
)

from .snapshot import LayoutSnapshot

__all__ = [
    # Enums
    'CellKind',
    'ActivityKind',
    'ClosenessRating',
    'CorridorKind',
    'DoorEdge',
    'DoorType',
    'LabelAlign',
    'CellType',
    'Severity',
    'RuleStatus',
    # Models
    'VALID_ROTATIONS',
    'GridSettings',
    'PaintedSquare',
    'Activity',
    'ActivityRelationship',
    'VolumeTiming',
    'Zone',
    'PlacedObject',
    'Door',
    'Point',
    'Corridor',
    # Config
    'DEFAULT_FACTOR_BUDGETS',
    'ScoringConfig',
    'DEFAULT_CONFIG',
    # Relationships
    'pair_key',
    'RelationshipIndex',
    'scorable_pairs',
    'rating_progress',
    'suggest_rating',
    'apply_sequence_suggestions',
    # Volumes
    'recompute_volume_percentages',
    'volume_share_by_activity',
    'volume_percentage',
    # Snapshot
    'LayoutSnapshot',
]
