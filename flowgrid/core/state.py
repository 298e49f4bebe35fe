"""
flowgrid/core/state.py - Layout state container

Owns every entity collection of one layout and applies user edits.
Geometric edits are validated before they are committed; a rejected
edit leaves the state untouched and raises PlacementError.

Scoring never reads this container directly. snapshot() freezes the
current contents and score() runs the pipeline on that snapshot.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Any, Dict, List, Optional, Set, Tuple
import logging

from flowgrid.errors import (
    DuplicateEntityError,
    EntityNotFoundError,
    InvalidRotationError,
    PlacementError,
)
from flowgrid.geometry.grid import Rect
from flowgrid.placement.validator import PlacementCheck, PlacementValidator

from .config import DEFAULT_CONFIG, ScoringConfig
from .enums import CellKind, ClosenessRating
from .models import (
    VALID_ROTATIONS,
    Activity,
    ActivityRelationship,
    Corridor,
    Door,
    GridSettings,
    PaintedSquare,
    PlacedObject,
    VolumeTiming,
    Zone,
)
from .relationships import RelationshipIndex, apply_sequence_suggestions, rating_progress
from .snapshot import LayoutSnapshot
from .volumes import recompute_volume_percentages

__all__ = ['LayoutState']

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]


class LayoutState:
    """
    Mutable application state for one layout.

    Not thread-safe; callers serialise edits and scoring.

    Usage:
        state = LayoutState(GridSettings(100, 80, 5))
        state.add_activity(Activity("recv", "Receiving", ActivityKind.WORK_AREA))
        state.add_zone(Zone("z1", 0, 0, 4, 3, activity_id="recv"))
        result = state.score()
    """

    def __init__(self, settings: GridSettings, config: Optional[ScoringConfig] = None):
        self._settings = settings
        self.config = config or DEFAULT_CONFIG

        self._activities: Dict[str, Activity] = {}
        self._zones: Dict[str, Zone] = {}
        self._objects: Dict[str, PlacedObject] = {}
        self._doors: Dict[str, Door] = {}
        self._corridors: Dict[str, Corridor] = {}
        self._painted: Dict[Cell, PaintedSquare] = {}
        self._relationships = RelationshipIndex()
        self._volumes: Dict[str, VolumeTiming] = {}
        self._dismissed: Set[str] = set()

        self.history: List[Dict[str, Any]] = []

    @classmethod
    def from_snapshot(
        cls,
        snapshot: LayoutSnapshot,
        config: Optional[ScoringConfig] = None,
    ) -> "LayoutState":
        """Bulk load. Entities are taken as already valid."""
        state = cls(snapshot.settings, config)
        state._activities = {a.id: a for a in snapshot.activities}
        state._zones = {z.id: z for z in snapshot.zones}
        state._objects = {o.id: o for o in snapshot.placed_objects}
        state._doors = {d.id: d for d in snapshot.doors}
        state._corridors = {c.id: c for c in snapshot.corridors}
        state._painted = {p.key: p for p in snapshot.painted_squares}
        state._relationships = RelationshipIndex(snapshot.relationships)
        state._volumes = {v.activity_id: v for v in snapshot.volumes}
        state._dismissed = set(snapshot.dismissed_flags)
        state._record("load", "layout", "snapshot")
        return state

    # ==================== Internal Helpers ====================

    def _record(self, action: str, entity_type: str, entity_id: Any) -> None:
        self.history.append({"action": action, "entity_type": entity_type, "entity_id": entity_id})

    @staticmethod
    def _require(collection: Dict, entity_type: str, entity_id: Any):
        if entity_id not in collection:
            raise EntityNotFoundError(entity_type, str(entity_id))
        return collection[entity_id]

    @staticmethod
    def _reject_duplicate(collection: Dict, entity_type: str, entity_id: Any) -> None:
        if entity_id in collection:
            raise DuplicateEntityError(entity_type, str(entity_id))

    def _raise_if_invalid(self, entity_id: str, check: PlacementCheck) -> None:
        if not check.is_valid:
            logger.warning(f"Rejected edit to {entity_id}: {'; '.join(check.reasons)}")
            raise PlacementError(entity_id, check.reasons, check.blocked_cells)

    @property
    def validator(self) -> PlacementValidator:
        return PlacementValidator(self._settings.dimensions, self._permanent_cells())

    def _permanent_cells(self) -> Set[Cell]:
        return {k for k, sq in self._painted.items() if sq.kind == CellKind.PERMANENT}

    # ==================== Settings ====================

    @property
    def settings(self) -> GridSettings:
        return self._settings

    def update_settings(self, settings: GridSettings) -> None:
        """Replace grid settings. Zones left out of bounds are logged, not moved."""
        self._settings = settings
        validator = self.validator
        for zone in self._zones.values():
            if not validator.can_place_zone(zone.rect):
                logger.warning(f"Zone {zone.id} no longer fits the {settings.dimensions.rows}x{settings.dimensions.cols} grid")
        self._record("update", "settings", "grid")

    # ==================== Activities ====================

    @property
    def activities(self) -> List[Activity]:
        return list(self._activities.values())

    def add_activity(self, activity: Activity) -> Activity:
        self._reject_duplicate(self._activities, "Activity", activity.id)
        self._activities[activity.id] = activity
        self._record("add", "activity", activity.id)
        return activity

    def update_activity(self, activity_id: str, **changes) -> Activity:
        activity = replace(self._require(self._activities, "Activity", activity_id), **changes)
        self._activities[activity_id] = activity
        self._record("update", "activity", activity_id)
        return activity

    def remove_activity(self, activity_id: str) -> None:
        """Remove an activity, unassigning its zones and dropping its ratings and volume."""
        self._require(self._activities, "Activity", activity_id)
        del self._activities[activity_id]

        for zone in list(self._zones.values()):
            if zone.activity_id == activity_id:
                self._zones[zone.id] = replace(zone, activity_id=None)
        for rel in self._relationships.involving(activity_id):
            self._relationships.remove(rel.activity_a_id, rel.activity_b_id)
        if self._volumes.pop(activity_id, None) is not None:
            self._recompute_volumes()

        self._record("remove", "activity", activity_id)

    # ==================== Zones ====================

    @property
    def zones(self) -> List[Zone]:
        return list(self._zones.values())

    def get_zone(self, zone_id: str) -> Zone:
        return self._require(self._zones, "Zone", zone_id)

    def _check_assignment(self, zone_id: str, activity_id: Optional[str]) -> None:
        """An activity occupies at most one zone."""
        if activity_id is None:
            return
        self._require(self._activities, "Activity", activity_id)
        for other in self._zones.values():
            if other.id != zone_id and other.activity_id == activity_id:
                logger.warning(f"Rejected assigning {activity_id} to {zone_id}: already placed in {other.id}")
                raise DuplicateEntityError("Zone for activity", activity_id, zone_id=other.id)

    def add_zone(self, zone: Zone) -> Zone:
        self._reject_duplicate(self._zones, "Zone", zone.id)
        self._check_assignment(zone.id, zone.activity_id)
        self._raise_if_invalid(zone.id, self.validator.check_zone(zone.rect))
        self._zones[zone.id] = zone
        self._record("add", "zone", zone.id)
        return zone

    def update_zone(self, zone_id: str, **changes) -> Zone:
        """Partial update; geometry changes are validated."""
        zone = replace(self.get_zone(zone_id), **changes)
        self._check_assignment(zone_id, zone.activity_id)
        self._raise_if_invalid(zone_id, self.validator.check_zone(zone.rect))
        self._zones[zone_id] = zone
        self._record("update", "zone", zone_id)
        return zone

    def move_zone(self, zone_id: str, dx: int, dy: int) -> Zone:
        zone = self.get_zone(zone_id)
        check = self.validator.move(zone.rect, dx, dy)
        self._raise_if_invalid(zone_id, check)
        zone = replace(zone, grid_x=check.rect.x, grid_y=check.rect.y)
        self._zones[zone_id] = zone
        self._record("move", "zone", zone_id)
        return zone

    def resize_zone(self, zone_id: str, dw: int, dh: int) -> Zone:
        zone = self.get_zone(zone_id)
        check = self.validator.resize(zone.rect, dw, dh)
        self._raise_if_invalid(zone_id, check)
        zone = replace(zone, grid_width=check.rect.w, grid_height=check.rect.h)
        self._zones[zone_id] = zone
        self._record("resize", "zone", zone_id)
        return zone

    def assign_zone(self, zone_id: str, activity_id: Optional[str]) -> Zone:
        """Assign a zone to an activity, or unassign with None."""
        return self.update_zone(zone_id, activity_id=activity_id)

    def remove_zone(self, zone_id: str) -> None:
        self._require(self._zones, "Zone", zone_id)
        del self._zones[zone_id]
        self._record("remove", "zone", zone_id)

    # ==================== Objects ====================

    @property
    def placed_objects(self) -> List[PlacedObject]:
        return list(self._objects.values())

    def get_object(self, object_id: str) -> PlacedObject:
        return self._require(self._objects, "Object", object_id)

    def place_object(self, obj: PlacedObject) -> PlacedObject:
        self._reject_duplicate(self._objects, "Object", obj.id)
        if obj.rotation not in VALID_ROTATIONS:
            raise InvalidRotationError(obj.rotation)
        self._raise_if_invalid(obj.id, self.validator.check_object(obj.footprint()))
        self._objects[obj.id] = obj
        self._record("add", "object", obj.id)
        return obj

    def move_object(self, object_id: str, dx: int, dy: int) -> PlacedObject:
        obj = self.get_object(object_id)
        check = self.validator.move(obj.footprint(), dx, dy, is_object=True)
        self._raise_if_invalid(object_id, check)
        obj = replace(obj, grid_x=check.rect.x, grid_y=check.rect.y)
        self._objects[object_id] = obj
        self._record("move", "object", object_id)
        return obj

    def rotate_object(self, object_id: str, rotation: int) -> PlacedObject:
        obj = self.get_object(object_id)
        self._raise_if_invalid(object_id, self.validator.rotate_object(obj, rotation))
        obj = replace(obj, rotation=rotation)
        self._objects[object_id] = obj
        self._record("rotate", "object", object_id)
        return obj

    def remove_object(self, object_id: str) -> None:
        self._require(self._objects, "Object", object_id)
        del self._objects[object_id]
        self._record("remove", "object", object_id)

    # ==================== Painted Cells ====================

    @property
    def painted_squares(self) -> List[PaintedSquare]:
        return [self._painted[k] for k in sorted(self._painted)]

    def paint_cell(
        self,
        row: int,
        col: int,
        kind: CellKind = CellKind.PERMANENT,
        label: Optional[str] = None,
    ) -> PaintedSquare:
        """Paint (or repaint) a cell. Zones already covering it are left in place."""
        if not self._settings.dimensions.contains(row, col):
            check = PlacementCheck(rect=Rect(col, row, 1, 1))
            check.reject(f"cell ({row}, {col}) is outside the grid")
            self._raise_if_invalid(f"cell-{row}-{col}", check)
        square = PaintedSquare(row=row, col=col, kind=kind, label=label)
        self._painted[square.key] = square
        self._record("paint", "cell", square.key)
        return square

    def clear_cell(self, row: int, col: int) -> None:
        if self._painted.pop((row, col), None) is not None:
            self._record("clear", "cell", (row, col))

    # ==================== Corridors and Doors ====================

    @property
    def corridors(self) -> List[Corridor]:
        return list(self._corridors.values())

    def add_corridor(self, corridor: Corridor) -> Corridor:
        self._reject_duplicate(self._corridors, "Corridor", corridor.id)
        self._corridors[corridor.id] = corridor
        self._record("add", "corridor", corridor.id)
        return corridor

    def update_corridor(self, corridor_id: str, **changes) -> Corridor:
        corridor = replace(self._require(self._corridors, "Corridor", corridor_id), **changes)
        self._corridors[corridor_id] = corridor
        self._record("update", "corridor", corridor_id)
        return corridor

    def remove_corridor(self, corridor_id: str) -> None:
        self._require(self._corridors, "Corridor", corridor_id)
        del self._corridors[corridor_id]
        self._record("remove", "corridor", corridor_id)

    @property
    def doors(self) -> List[Door]:
        return list(self._doors.values())

    def add_door(self, door: Door) -> Door:
        self._reject_duplicate(self._doors, "Door", door.id)
        self._doors[door.id] = door
        self._record("add", "door", door.id)
        return door

    def update_door(self, door_id: str, **changes) -> Door:
        door = replace(self._require(self._doors, "Door", door_id), **changes)
        self._doors[door_id] = door
        self._record("update", "door", door_id)
        return door

    def remove_door(self, door_id: str) -> None:
        self._require(self._doors, "Door", door_id)
        del self._doors[door_id]
        self._record("remove", "door", door_id)

    # ==================== Volumes ====================

    @property
    def volumes(self) -> List[VolumeTiming]:
        return list(self._volumes.values())

    def _recompute_volumes(self) -> None:
        rows = recompute_volume_percentages(self._volumes.values())
        self._volumes = {r.activity_id: r for r in rows}

    def set_volume(
        self,
        activity_id: str,
        typical_volume_per_shift: float,
        peak_volume_per_shift: Optional[float] = None,
    ) -> VolumeTiming:
        """Set an activity's volume; every row's percentage is recomputed."""
        self._require(self._activities, "Activity", activity_id)
        current = self._volumes.get(activity_id, VolumeTiming(activity_id=activity_id))
        self._volumes[activity_id] = replace(
            current,
            typical_volume_per_shift=typical_volume_per_shift,
            peak_volume_per_shift=(
                current.peak_volume_per_shift if peak_volume_per_shift is None
                else peak_volume_per_shift
            ),
        )
        self._recompute_volumes()
        self._record("set", "volume", activity_id)
        return self._volumes[activity_id]

    # ==================== Relationships ====================

    @property
    def relationships(self) -> List[ActivityRelationship]:
        return list(self._relationships)

    def set_relationship(
        self,
        activity_a_id: str,
        activity_b_id: str,
        rating: ClosenessRating,
        reason: Optional[str] = None,
    ) -> ActivityRelationship:
        self._require(self._activities, "Activity", activity_a_id)
        self._require(self._activities, "Activity", activity_b_id)
        rel = self._relationships.put(ActivityRelationship(
            activity_a_id=activity_a_id,
            activity_b_id=activity_b_id,
            rating=rating,
            reason=reason,
        ))
        self._record("set", "relationship", (rel.activity_a_id, rel.activity_b_id))
        return rel

    def get_rating(self, activity_a_id: str, activity_b_id: str) -> ClosenessRating:
        return self._relationships.rating(activity_a_id, activity_b_id)

    def clear_relationship(self, activity_a_id: str, activity_b_id: str) -> None:
        if self._relationships.remove(activity_a_id, activity_b_id) is not None:
            self._record("clear", "relationship", (activity_a_id, activity_b_id))

    def apply_sequence_suggestions(self) -> List[ActivityRelationship]:
        """Pre-populate ratings from sequence order, keeping explicit ratings."""
        self._relationships = RelationshipIndex(
            apply_sequence_suggestions(self.activities, self._relationships)
        )
        self._record("suggest", "relationship", "sequence")
        return self.relationships

    def rating_progress(self) -> Tuple[int, int]:
        return rating_progress(self.activities, self._relationships)

    # ==================== Flag Dismissal ====================

    @property
    def dismissed_flags(self) -> Set[str]:
        return set(self._dismissed)

    def dismiss_flag(self, flag_id: str) -> None:
        self._dismissed.add(flag_id)
        self._record("dismiss", "flag", flag_id)

    def undismiss_flag(self, flag_id: str) -> None:
        self._dismissed.discard(flag_id)
        self._record("undismiss", "flag", flag_id)

    # ==================== Snapshot and Scoring ====================

    def snapshot(self) -> LayoutSnapshot:
        return LayoutSnapshot.create(
            settings=self._settings,
            activities=self._activities.values(),
            zones=self._zones.values(),
            doors=self._doors.values(),
            corridors=self._corridors.values(),
            painted_squares=self._painted.values(),
            relationships=self._relationships,
            volumes=self._volumes.values(),
            placed_objects=self._objects.values(),
            dismissed_flags=self._dismissed,
        )

    def score(self):
        """Score the current layout (returns a LayoutScore)."""
        from flowgrid.scoring.pipeline import score_layout
        return score_layout(self.snapshot(), self.config)

    def resolved_flags(self, score=None):
        """Flags of a score with dismissal resolved against this state."""
        from flowgrid.scoring.rendering import resolve_flags
        return resolve_flags(score if score is not None else self.score(), self._dismissed)

    def summary(self) -> str:
        dims = self._settings.dimensions
        return (
            f"LayoutState({dims.rows}x{dims.cols}, {len(self._activities)} activities, "
            f"{len(self._zones)} zones, {len(self._corridors)} corridors, "
            f"{len(self._doors)} doors)"
        )

    def __repr__(self) -> str:
        return self.summary()
