"""
FlowGrid Layout Models

Plain records for everything a user places on the floor grid. No record
owns another; the state container keys them into flat collections.

Records are frozen. Edits are expressed with dataclasses.replace() so a
snapshot handed to the scorers can never change underneath them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Type, TypeVar
import logging

from flowgrid.geometry.grid import GridDimensions, Rect, to_grid_dims

from .enums import (
    ActivityKind,
    CellKind,
    ClosenessRating,
    CorridorKind,
    DoorEdge,
    DoorType,
    LabelAlign,
)

logger = logging.getLogger(__name__)

E = TypeVar("E")

VALID_ROTATIONS = (0, 90, 180, 270)


def _enum(enum_cls: Type[E], value: Any, default: E) -> E:
    """Coerce a stored string (or enum) to an enum member."""
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    return enum_cls(value)


# =============================================================================
# GRID SETTINGS
# =============================================================================

@dataclass(frozen=True)
class GridSettings:
    """Facility footprint and cell size, in the user's measurement units."""
    facility_width: float
    facility_height: float
    square_size: float
    measurement_system: str = "US"

    @property
    def dimensions(self) -> GridDimensions:
        return to_grid_dims(self.facility_width, self.facility_height, self.square_size)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "facility_width": self.facility_width,
            "facility_height": self.facility_height,
            "square_size": self.square_size,
            "measurement_system": self.measurement_system,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GridSettings":
        return cls(
            facility_width=data["facility_width"],
            facility_height=data["facility_height"],
            square_size=data["square_size"],
            measurement_system=data.get("measurement_system", "US"),
        )


# =============================================================================
# PAINTED SQUARES
# =============================================================================

@dataclass(frozen=True)
class PaintedSquare:
    """A fixed cell marker keyed by (row, col)."""
    row: int
    col: int
    kind: CellKind
    label: Optional[str] = None

    @property
    def key(self) -> Tuple[int, int]:
        return self.row, self.col

    @property
    def is_permanent(self) -> bool:
        return self.kind == CellKind.PERMANENT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row": self.row,
            "col": self.col,
            "kind": self.kind.value,
            "label": self.label,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaintedSquare":
        return cls(
            row=data["row"],
            col=data["col"],
            kind=_enum(CellKind, data.get("kind", data.get("type")), CellKind.PERMANENT),
            label=data.get("label"),
        )


# =============================================================================
# ACTIVITIES
# =============================================================================

@dataclass(frozen=True)
class Activity:
    """A named operational function that occupies at most one zone."""
    id: str
    name: str
    kind: ActivityKind
    sort_order: int = 0
    sequence_order: Optional[int] = None
    destination_code: Optional[str] = None
    color: Optional[str] = None
    departure_time: Optional[str] = None  # "HH:MM", compared as text

    @property
    def is_staging_lane(self) -> bool:
        return self.kind == ActivityKind.STAGING_LANE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "sort_order": self.sort_order,
            "sequence_order": self.sequence_order,
            "destination_code": self.destination_code,
            "color": self.color,
            "departure_time": self.departure_time,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Activity":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            kind=_enum(ActivityKind, data.get("kind", data.get("type")), ActivityKind.WORK_AREA),
            sort_order=data.get("sort_order", 0),
            sequence_order=data.get("sequence_order"),
            destination_code=data.get("destination_code"),
            color=data.get("color"),
            departure_time=data.get("departure_time"),
        )


@dataclass(frozen=True)
class ActivityRelationship:
    """Closeness preference for an unordered activity pair."""
    activity_a_id: str
    activity_b_id: str
    rating: ClosenessRating = ClosenessRating.DOES_NOT_MATTER
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activity_a_id": self.activity_a_id,
            "activity_b_id": self.activity_b_id,
            "rating": self.rating.value,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActivityRelationship":
        return cls(
            activity_a_id=data["activity_a_id"],
            activity_b_id=data["activity_b_id"],
            rating=_enum(ClosenessRating, data.get("rating"), ClosenessRating.DOES_NOT_MATTER),
            reason=data.get("reason"),
        )


@dataclass(frozen=True)
class VolumeTiming:
    """Per-shift volume for one activity. percentage is derived."""
    activity_id: str
    typical_volume_per_shift: float = 0.0
    peak_volume_per_shift: float = 0.0
    percentage: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activity_id": self.activity_id,
            "typical_volume_per_shift": self.typical_volume_per_shift,
            "peak_volume_per_shift": self.peak_volume_per_shift,
            "percentage": self.percentage,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VolumeTiming":
        return cls(
            activity_id=data["activity_id"],
            typical_volume_per_shift=data.get("typical_volume_per_shift") or 0.0,
            peak_volume_per_shift=data.get("peak_volume_per_shift") or 0.0,
            percentage=data.get("percentage") or 0.0,
        )


# =============================================================================
# ZONES AND OBJECTS
# =============================================================================

@dataclass(frozen=True)
class Zone:
    """Rectangular grid area, optionally assigned to an activity."""
    id: str
    grid_x: int
    grid_y: int
    grid_width: int
    grid_height: int
    activity_id: Optional[str] = None
    name: str = ""
    color: str = "#3B82F6"
    label_align: LabelAlign = LabelAlign.CENTER

    @property
    def rect(self) -> Rect:
        return Rect(self.grid_x, self.grid_y, self.grid_width, self.grid_height)

    @property
    def area(self) -> int:
        return self.grid_width * self.grid_height

    @property
    def is_assigned(self) -> bool:
        return self.activity_id is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "activity_id": self.activity_id,
            "name": self.name,
            "grid_x": self.grid_x,
            "grid_y": self.grid_y,
            "grid_width": self.grid_width,
            "grid_height": self.grid_height,
            "color": self.color,
            "label_align": self.label_align.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Zone":
        return cls(
            id=data["id"],
            grid_x=data["grid_x"],
            grid_y=data["grid_y"],
            grid_width=data["grid_width"],
            grid_height=data["grid_height"],
            activity_id=data.get("activity_id"),
            name=data.get("name", ""),
            color=data.get("color", "#3B82F6"),
            label_align=_enum(LabelAlign, data.get("label_align"), LabelAlign.CENTER),
        )


@dataclass(frozen=True)
class PlacedObject:
    """
    Equipment or fixture placed on the grid.

    grid_width/grid_height are the unrotated size; footprint() applies
    the rotation.
    """
    id: str
    grid_x: int
    grid_y: int
    grid_width: int
    grid_height: int
    rotation: int = 0
    color: str = "#6B7280"
    object_name: str = ""

    def footprint(self) -> Rect:
        """Occupied rectangle after rotation."""
        if self.rotation in (90, 270):
            return Rect(self.grid_x, self.grid_y, self.grid_height, self.grid_width)
        return Rect(self.grid_x, self.grid_y, self.grid_width, self.grid_height)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "object_name": self.object_name,
            "grid_x": self.grid_x,
            "grid_y": self.grid_y,
            "grid_width": self.grid_width,
            "grid_height": self.grid_height,
            "rotation": self.rotation,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlacedObject":
        return cls(
            id=data["id"],
            grid_x=data["grid_x"],
            grid_y=data["grid_y"],
            grid_width=data["grid_width"],
            grid_height=data["grid_height"],
            rotation=data.get("rotation", 0),
            color=data.get("color", "#6B7280"),
            object_name=data.get("object_name", ""),
        )


# =============================================================================
# DOORS
# =============================================================================

@dataclass(frozen=True)
class Door:
    """
    Perimeter door.

    Occupies `width` cells along its edge starting at (grid_x, grid_y):
    along the row for top/bottom doors, down the column for left/right.
    """
    id: str
    width: int
    has_inbound_material: bool = False
    has_outbound_material: bool = False
    inbound_percentage: Optional[float] = None
    outbound_percentage: Optional[float] = None
    inbound_flow_points: Optional[Tuple["Point", ...]] = None
    outbound_flow_points: Optional[Tuple["Point", ...]] = None
    name: str = ""
    grid_x: int = 0
    grid_y: int = 0
    edge: DoorEdge = DoorEdge.TOP
    door_type: DoorType = DoorType.LOADING_DOCK
    has_vehicle_access: bool = False
    is_personnel_only: bool = False

    @property
    def is_exit(self) -> bool:
        """Outbound material or vehicles leave through this door."""
        return self.has_outbound_material or self.has_vehicle_access

    @property
    def is_personnel(self) -> bool:
        return self.is_personnel_only or self.door_type == DoorType.PERSONNEL

    @property
    def is_egress(self) -> bool:
        """Usable as an emergency exit by people."""
        return self.is_personnel or self.door_type == DoorType.EMERGENCY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "width": self.width,
            "grid_x": self.grid_x,
            "grid_y": self.grid_y,
            "edge": self.edge.value,
            "door_type": self.door_type.value,
            "has_inbound_material": self.has_inbound_material,
            "has_outbound_material": self.has_outbound_material,
            "has_vehicle_access": self.has_vehicle_access,
            "is_personnel_only": self.is_personnel_only,
            "inbound_percentage": self.inbound_percentage,
            "outbound_percentage": self.outbound_percentage,
            "inbound_flow_points": _points_to_list(self.inbound_flow_points),
            "outbound_flow_points": _points_to_list(self.outbound_flow_points),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Door":
        return cls(
            id=data["id"],
            width=data.get("width", 1),
            has_inbound_material=bool(data.get("has_inbound_material", False)),
            has_outbound_material=bool(data.get("has_outbound_material", False)),
            inbound_percentage=data.get("inbound_percentage"),
            outbound_percentage=data.get("outbound_percentage"),
            inbound_flow_points=_points_from_list(data.get("inbound_flow_points")),
            outbound_flow_points=_points_from_list(data.get("outbound_flow_points")),
            name=data.get("name", ""),
            grid_x=data.get("grid_x", 0),
            grid_y=data.get("grid_y", 0),
            edge=_enum(DoorEdge, data.get("edge"), DoorEdge.TOP),
            door_type=_enum(DoorType, data.get("door_type", data.get("type")), DoorType.LOADING_DOCK),
            has_vehicle_access=bool(data.get("has_vehicle_access", False)),
            is_personnel_only=bool(data.get("is_personnel_only", False)),
        )


# =============================================================================
# CORRIDORS
# =============================================================================

@dataclass(frozen=True)
class Point:
    """Grid waypoint (x = column, y = row)."""
    x: int
    y: int

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y}


def _points_to_list(points: Optional[Tuple[Point, ...]]):
    if points is None:
        return None
    return [p.to_dict() for p in points]


def _points_from_list(data) -> Optional[Tuple[Point, ...]]:
    if not data:
        return None
    return tuple(Point(p["x"], p["y"]) for p in data)


@dataclass(frozen=True)
class Corridor:
    """
    Pedestrian walkway or forklift path.

    New corridors carry a waypoint polyline in `points`; older records
    only have start/end cells, which waypoints() falls back to.
    """
    id: str
    kind: CorridorKind
    width: int = 1
    points: Tuple[Point, ...] = field(default_factory=tuple)
    start_grid_x: int = 0
    start_grid_y: int = 0
    end_grid_x: int = 0
    end_grid_y: int = 0
    name: str = ""
    color: str = ""

    @property
    def is_forklift(self) -> bool:
        return self.kind == CorridorKind.FORKLIFT

    def waypoints(self) -> Tuple[Point, ...]:
        if len(self.points) >= 2:
            return self.points
        return (
            Point(self.start_grid_x, self.start_grid_y),
            Point(self.end_grid_x, self.end_grid_y),
        )

    def length(self) -> int:
        """Manhattan length over consecutive waypoints."""
        pts = self.waypoints()
        return sum(
            abs(b.x - a.x) + abs(b.y - a.y)
            for a, b in zip(pts, pts[1:])
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "width": self.width,
            "points": [p.to_dict() for p in self.points],
            "start_grid_x": self.start_grid_x,
            "start_grid_y": self.start_grid_y,
            "end_grid_x": self.end_grid_x,
            "end_grid_y": self.end_grid_y,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Corridor":
        return cls(
            id=data["id"],
            kind=_enum(CorridorKind, data.get("kind", data.get("type")), CorridorKind.PEDESTRIAN),
            width=data.get("width", 1),
            points=_points_from_list(data.get("points")) or (),
            start_grid_x=data.get("start_grid_x", 0),
            start_grid_y=data.get("start_grid_y", 0),
            end_grid_x=data.get("end_grid_x", 0),
            end_grid_y=data.get("end_grid_y", 0),
            name=data.get("name", ""),
            color=data.get("color", ""),
        )
