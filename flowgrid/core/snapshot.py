"""
flowgrid/core/snapshot.py - Layout snapshot contract

Immutable input to the scoring pipeline. Decouples the scorers from the
state container, so they can be tested with synthetic data and never
observe a half-applied edit.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple
import logging

from flowgrid.errors import SnapshotFormatError
from flowgrid.geometry.grid import GridDimensions

from .enums import ActivityKind, CellKind
from .models import (
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
from .relationships import RelationshipIndex, normalize

__all__ = ['LayoutSnapshot']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutSnapshot:
    """
    Read-only view of everything the scorers consume.

    Attributes:
        settings: Facility size and cell size
        activities: Defined activities
        zones: Placed zones (assigned or not)
        doors: Perimeter doors
        corridors: Pedestrian and forklift corridors
        painted_squares: Fixed cell markers, unique by (row, col)
        relationships: Closeness ratings in canonical pair order
        volumes: Volume rows with derived percentages
        placed_objects: Equipment footprints
        dismissed_flags: Flag ids the user has dismissed
    """

    settings: GridSettings
    activities: Tuple[Activity, ...] = ()
    zones: Tuple[Zone, ...] = ()
    doors: Tuple[Door, ...] = ()
    corridors: Tuple[Corridor, ...] = ()
    painted_squares: Tuple[PaintedSquare, ...] = ()
    relationships: Tuple[ActivityRelationship, ...] = ()
    volumes: Tuple[VolumeTiming, ...] = ()
    placed_objects: Tuple[PlacedObject, ...] = ()
    dismissed_flags: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def create(
        cls,
        settings: GridSettings,
        activities: Iterable[Activity] = (),
        zones: Iterable[Zone] = (),
        doors: Iterable[Door] = (),
        corridors: Iterable[Corridor] = (),
        painted_squares: Iterable[PaintedSquare] = (),
        relationships: Iterable[ActivityRelationship] = (),
        volumes: Iterable[VolumeTiming] = (),
        placed_objects: Iterable[PlacedObject] = (),
        dismissed_flags: Optional[Iterable[str]] = None,
    ) -> "LayoutSnapshot":
        """
        Build a snapshot from mutable collections.

        Painted squares are de-duplicated by cell (last one wins) and
        relationships by canonical pair.
        """
        painted: Dict[Tuple[int, int], PaintedSquare] = {}
        for sq in painted_squares:
            painted[sq.key] = sq

        return cls(
            settings=settings,
            activities=tuple(activities),
            zones=tuple(zones),
            doors=tuple(doors),
            corridors=tuple(corridors),
            painted_squares=tuple(painted[k] for k in sorted(painted)),
            relationships=tuple(RelationshipIndex(normalize(r) for r in relationships)),
            volumes=tuple(volumes),
            placed_objects=tuple(placed_objects),
            dismissed_flags=frozenset(dismissed_flags or ()),
        )

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    @property
    def dimensions(self) -> GridDimensions:
        return self.settings.dimensions

    def activity(self, activity_id: Optional[str]) -> Optional[Activity]:
        if activity_id is None:
            return None
        for act in self.activities:
            if act.id == activity_id:
                return act
        return None

    def zone_for(self, activity_id: str) -> Optional[Zone]:
        """First zone assigned to an activity."""
        for zone in self.zones:
            if zone.activity_id == activity_id:
                return zone
        return None

    def zones_of_kind(self, kind: ActivityKind) -> List[Tuple[Zone, Activity]]:
        """Assigned zones whose activity has the given kind, in zone order."""
        result = []
        for zone in self.zones:
            act = self.activity(zone.activity_id)
            if act is not None and act.kind == kind:
                result.append((zone, act))
        return result

    def relationship_index(self) -> RelationshipIndex:
        return RelationshipIndex(self.relationships)

    def permanent_cells(self) -> FrozenSet[Tuple[int, int]]:
        return frozenset(sq.key for sq in self.painted_squares if sq.kind == CellKind.PERMANENT)

    def semi_fixed_cells(self) -> FrozenSet[Tuple[int, int]]:
        return frozenset(sq.key for sq in self.painted_squares if sq.kind == CellKind.SEMI_FIXED)

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "settings": self.settings.to_dict(),
            "activities": [a.to_dict() for a in self.activities],
            "zones": [z.to_dict() for z in self.zones],
            "doors": [d.to_dict() for d in self.doors],
            "corridors": [c.to_dict() for c in self.corridors],
            "painted_squares": [p.to_dict() for p in self.painted_squares],
            "relationships": [r.to_dict() for r in self.relationships],
            "volumes": [v.to_dict() for v in self.volumes],
            "placed_objects": [o.to_dict() for o in self.placed_objects],
            "dismissed_flags": sorted(self.dismissed_flags),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LayoutSnapshot":
        """
        Parse a snapshot from persisted rows.

        Raises:
            SnapshotFormatError: settings missing or a record lacks a
                required key or carries an unknown enum value
        """
        if "settings" not in data:
            raise SnapshotFormatError("settings", "missing")

        def _parse(key, parser):
            try:
                return [parser(item) for item in data.get(key) or []]
            except (KeyError, ValueError, TypeError) as e:
                raise SnapshotFormatError(key, str(e)) from e

        try:
            settings = GridSettings.from_dict(data["settings"])
        except (KeyError, TypeError) as e:
            raise SnapshotFormatError("settings", str(e)) from e

        snapshot = cls.create(
            settings=settings,
            activities=_parse("activities", Activity.from_dict),
            zones=_parse("zones", Zone.from_dict),
            doors=_parse("doors", Door.from_dict),
            corridors=_parse("corridors", Corridor.from_dict),
            painted_squares=_parse("painted_squares", PaintedSquare.from_dict),
            relationships=_parse("relationships", ActivityRelationship.from_dict),
            volumes=_parse("volumes", VolumeTiming.from_dict),
            placed_objects=_parse("placed_objects", PlacedObject.from_dict),
            dismissed_flags=data.get("dismissed_flags") or (),
        )
        logger.debug(
            f"Parsed snapshot: {len(snapshot.activities)} activities, "
            f"{len(snapshot.zones)} zones, {len(snapshot.corridors)} corridors"
        )
        return snapshot
