"""
FlowGrid Test Configuration and Fixtures

Grid settings and snapshot builders shared by the unit suites.
"""

import pytest
from typing import Callable

from flowgrid.core.enums import ActivityKind, CorridorKind
from flowgrid.core.models import Activity, Corridor, GridSettings, Point, Zone
from flowgrid.core.snapshot import LayoutSnapshot


@pytest.fixture
def settings_10x10() -> GridSettings:
    """100 x 100 facility in 10-unit squares: a 10 x 10 grid."""
    return GridSettings(facility_width=100, facility_height=100, square_size=10)


@pytest.fixture
def build_snapshot(settings_10x10) -> Callable[..., LayoutSnapshot]:
    """
    Factory for snapshots on the 10 x 10 grid.

    Usage:
        snapshot = build_snapshot(activities=[...], zones=[...])
    """
    def _build(**kwargs) -> LayoutSnapshot:
        kwargs.setdefault("settings", settings_10x10)
        return LayoutSnapshot.create(**kwargs)

    return _build


@pytest.fixture
def make_activity() -> Callable[..., Activity]:
    def _make(activity_id: str, kind: ActivityKind = ActivityKind.WORK_AREA, **kwargs) -> Activity:
        kwargs.setdefault("name", activity_id.capitalize())
        return Activity(id=activity_id, kind=kind, **kwargs)

    return _make


@pytest.fixture
def make_zone() -> Callable[..., Zone]:
    def _make(zone_id: str, x: int, y: int, w: int, h: int, activity_id=None, **kwargs) -> Zone:
        return Zone(
            id=zone_id,
            grid_x=x,
            grid_y=y,
            grid_width=w,
            grid_height=h,
            activity_id=activity_id,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_corridor() -> Callable[..., Corridor]:
    def _make(corridor_id: str, kind: CorridorKind, points, width: int = 1, **kwargs) -> Corridor:
        return Corridor(
            id=corridor_id,
            kind=kind,
            width=width,
            points=tuple(Point(x, y) for x, y in points),
            **kwargs,
        )

    return _make
