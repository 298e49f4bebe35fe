"""
Unit tests for core/state.py

Tests LayoutState edits, validation on geometric changes, derived
volume percentages, relationship storage and flag dismissal.
"""

import logging
import pytest

from flowgrid.core.enums import ActivityKind, CellKind, ClosenessRating, CorridorKind
from flowgrid.core.models import Activity, Corridor, Door, GridSettings, PlacedObject, Point, Zone
from flowgrid.core.state import LayoutState
from flowgrid.errors import (
    DuplicateEntityError,
    EntityNotFoundError,
    InvalidRotationError,
    PlacementError,
)
from flowgrid.geometry.grid import Rect


@pytest.fixture
def state(settings_10x10):
    s = LayoutState(settings_10x10)
    s.add_activity(Activity(id="recv", name="Receiving", kind=ActivityKind.WORK_AREA, sequence_order=1))
    s.add_activity(Activity(id="pack", name="Packing", kind=ActivityKind.WORK_AREA, sequence_order=2))
    s.add_activity(Activity(id="lane", name="Lane 1", kind=ActivityKind.STAGING_LANE))
    return s


# =============================================================================
# ACTIVITIES
# =============================================================================

class TestActivities:
    """Test activity CRUD."""

    def test_duplicate_rejected(self, state):
        with pytest.raises(DuplicateEntityError):
            state.add_activity(Activity(id="recv", name="Again", kind=ActivityKind.WORK_AREA))

    def test_update(self, state):
        updated = state.update_activity("lane", departure_time="06:30")
        assert updated.departure_time == "06:30"
        assert state.snapshot().activity("lane").departure_time == "06:30"

    def test_update_missing(self, state):
        with pytest.raises(EntityNotFoundError):
            state.update_activity("nope", name="x")

    def test_remove_cascades(self, state):
        state.add_zone(Zone(id="z1", grid_x=0, grid_y=0, grid_width=2, grid_height=2, activity_id="recv"))
        state.set_relationship("recv", "pack", ClosenessRating.MUST_BE_CLOSE)
        state.set_volume("recv", 60)
        state.set_volume("pack", 40)

        state.remove_activity("recv")

        assert state.get_zone("z1").activity_id is None
        assert state.relationships == []
        assert [v.activity_id for v in state.volumes] == ["pack"]
        assert state.volumes[0].percentage == 100.0


# =============================================================================
# ZONES
# =============================================================================

class TestZones:
    """Test validated zone edits."""

    def test_add_zone(self, state):
        zone = state.add_zone(Zone(id="z1", grid_x=2, grid_y=2, grid_width=3, grid_height=3))
        assert state.get_zone("z1") == zone
        assert state.history[-1] == {"action": "add", "entity_type": "zone", "entity_id": "z1"}

    def test_zone_on_permanent_cell_rejected(self, state):
        state.paint_cell(3, 3, CellKind.PERMANENT)
        with pytest.raises(PlacementError) as exc_info:
            state.add_zone(Zone(id="z1", grid_x=2, grid_y=2, grid_width=3, grid_height=3))
        assert exc_info.value.blocked_cells == [(3, 3)]
        assert state.zones == []

    def test_zone_on_semi_fixed_cell_allowed(self, state):
        state.paint_cell(3, 3, CellKind.SEMI_FIXED)
        state.add_zone(Zone(id="z1", grid_x=2, grid_y=2, grid_width=3, grid_height=3))
        assert len(state.zones) == 1

    def test_zone_for_unknown_activity(self, state):
        with pytest.raises(EntityNotFoundError):
            state.add_zone(Zone(id="z1", grid_x=0, grid_y=0, grid_width=1, grid_height=1, activity_id="ghost"))

    def test_duplicate_zone(self, state):
        state.add_zone(Zone(id="z1", grid_x=0, grid_y=0, grid_width=1, grid_height=1))
        with pytest.raises(DuplicateEntityError):
            state.add_zone(Zone(id="z1", grid_x=5, grid_y=5, grid_width=1, grid_height=1))

    def test_move_zone(self, state):
        state.add_zone(Zone(id="z1", grid_x=0, grid_y=0, grid_width=2, grid_height=2))
        moved = state.move_zone("z1", 3, 4)
        assert moved.rect == Rect(3, 4, 2, 2)

    def test_rejected_move_leaves_zone_unchanged(self, state):
        state.add_zone(Zone(id="z1", grid_x=0, grid_y=0, grid_width=2, grid_height=2))
        with pytest.raises(PlacementError):
            state.move_zone("z1", 9, 0)
        assert state.get_zone("z1").rect == Rect(0, 0, 2, 2)

    def test_resize_zone(self, state):
        state.add_zone(Zone(id="z1", grid_x=1, grid_y=1, grid_width=2, grid_height=2))
        assert state.resize_zone("z1", 2, 1).rect == Rect(1, 1, 4, 3)
        with pytest.raises(PlacementError):
            state.resize_zone("z1", -4, 0)
        assert state.get_zone("z1").grid_width == 4

    def test_assign_and_unassign(self, state):
        state.add_zone(Zone(id="z1", grid_x=0, grid_y=0, grid_width=2, grid_height=2))
        assert state.assign_zone("z1", "pack").activity_id == "pack"
        assert state.assign_zone("z1", None).activity_id is None

    def test_second_zone_for_activity_rejected(self, state):
        state.add_zone(Zone(id="z1", grid_x=0, grid_y=0, grid_width=2, grid_height=2, activity_id="recv"))
        with pytest.raises(DuplicateEntityError) as exc_info:
            state.add_zone(Zone(id="z2", grid_x=5, grid_y=5, grid_width=2, grid_height=2, activity_id="recv"))
        assert exc_info.value.details["zone_id"] == "z1"
        assert [z.id for z in state.zones] == ["z1"]

    def test_assign_activity_already_placed(self, state):
        state.add_zone(Zone(id="z1", grid_x=0, grid_y=0, grid_width=2, grid_height=2, activity_id="lane"))
        state.add_zone(Zone(id="z2", grid_x=5, grid_y=5, grid_width=2, grid_height=2))
        with pytest.raises(DuplicateEntityError):
            state.assign_zone("z2", "lane")
        with pytest.raises(DuplicateEntityError):
            state.update_zone("z2", activity_id="lane")
        assert state.get_zone("z2").activity_id is None

    def test_reassign_after_unassign(self, state):
        state.add_zone(Zone(id="z1", grid_x=0, grid_y=0, grid_width=2, grid_height=2, activity_id="lane"))
        state.add_zone(Zone(id="z2", grid_x=5, grid_y=5, grid_width=2, grid_height=2))
        state.assign_zone("z1", None)
        assert state.assign_zone("z2", "lane").activity_id == "lane"
        # Re-saving a zone with its own activity is not a conflict
        assert state.update_zone("z2", grid_x=4).activity_id == "lane"

    def test_remove_missing_zone(self, state):
        with pytest.raises(EntityNotFoundError):
            state.remove_zone("nope")

    def test_shrinking_grid_logs_warning(self, state, caplog):
        state.add_zone(Zone(id="z1", grid_x=7, grid_y=7, grid_width=3, grid_height=3))
        with caplog.at_level(logging.WARNING, logger="flowgrid.core.state"):
            state.update_settings(GridSettings(facility_width=50, facility_height=50, square_size=10))
        assert "z1" in caplog.text
        assert state.get_zone("z1").grid_x == 7


# =============================================================================
# OBJECTS AND CELLS
# =============================================================================

class TestObjects:
    """Test placed objects."""

    def test_object_may_cover_permanent_cell(self, state):
        state.paint_cell(0, 0, CellKind.PERMANENT)
        state.place_object(PlacedObject(id="o1", grid_x=0, grid_y=0, grid_width=2, grid_height=1))
        assert len(state.placed_objects) == 1

    def test_object_out_of_bounds(self, state):
        with pytest.raises(PlacementError):
            state.place_object(PlacedObject(id="o1", grid_x=9, grid_y=0, grid_width=2, grid_height=1))

    def test_invalid_initial_rotation(self, state):
        with pytest.raises(InvalidRotationError):
            state.place_object(PlacedObject(id="o1", grid_x=0, grid_y=0, grid_width=1, grid_height=1, rotation=45))

    def test_rotate_object(self, state):
        state.place_object(PlacedObject(id="o1", grid_x=0, grid_y=0, grid_width=4, grid_height=1))
        rotated = state.rotate_object("o1", 90)
        assert rotated.footprint() == Rect(0, 0, 1, 4)

    def test_rotation_past_edge_rejected(self, state):
        state.place_object(PlacedObject(id="o1", grid_x=0, grid_y=8, grid_width=4, grid_height=1))
        with pytest.raises(PlacementError):
            state.rotate_object("o1", 270)
        assert state.get_object("o1").rotation == 0

    def test_move_object(self, state):
        state.place_object(PlacedObject(id="o1", grid_x=0, grid_y=0, grid_width=2, grid_height=1))
        assert state.move_object("o1", 8, 9).grid_x == 8
        with pytest.raises(PlacementError):
            state.move_object("o1", 1, 0)


class TestCells:
    """Test painting cells."""

    def test_paint_and_clear(self, state):
        state.paint_cell(1, 1)
        state.paint_cell(1, 1, CellKind.SEMI_FIXED, label="Pillar")
        assert len(state.painted_squares) == 1
        assert state.painted_squares[0].kind == CellKind.SEMI_FIXED
        state.clear_cell(1, 1)
        assert state.painted_squares == []

    def test_paint_outside_grid(self, state):
        with pytest.raises(PlacementError):
            state.paint_cell(10, 0)


# =============================================================================
# CORRIDORS, DOORS, VOLUMES, RELATIONSHIPS
# =============================================================================

class TestCorridorsAndDoors:
    """Test corridor and door CRUD."""

    def test_corridor_lifecycle(self, state):
        state.add_corridor(Corridor(id="c1", kind=CorridorKind.FORKLIFT, points=(Point(0, 0), Point(5, 0))))
        assert state.update_corridor("c1", width=2).width == 2
        state.remove_corridor("c1")
        assert state.corridors == []

    def test_door_lifecycle(self, state):
        state.add_door(Door(id="d1", width=2))
        with pytest.raises(DuplicateEntityError):
            state.add_door(Door(id="d1", width=1))
        assert state.update_door("d1", has_outbound_material=True).is_exit
        state.remove_door("d1")
        with pytest.raises(EntityNotFoundError):
            state.remove_door("d1")


class TestVolumes:
    """Test derived volume percentages."""

    def test_percentages_sum_to_100(self, state):
        state.set_volume("recv", 10)
        state.set_volume("pack", 20)
        state.set_volume("lane", 70)
        shares = {v.activity_id: v.percentage for v in state.volumes}
        assert shares["lane"] == pytest.approx(70.0)
        assert sum(shares.values()) == pytest.approx(100.0)

    def test_zero_volume_row(self, state):
        state.set_volume("recv", 0)
        state.set_volume("pack", 50)
        shares = {v.activity_id: v.percentage for v in state.volumes}
        assert shares == {"recv": 0.0, "pack": 100.0}

    def test_peak_preserved(self, state):
        state.set_volume("recv", 10, peak_volume_per_shift=25)
        assert state.set_volume("recv", 12).peak_volume_per_shift == 25

    def test_unknown_activity(self, state):
        with pytest.raises(EntityNotFoundError):
            state.set_volume("ghost", 10)


class TestRelationships:
    """Test relationship storage through the state container."""

    def test_canonical_storage(self, state):
        state.set_relationship("recv", "pack", ClosenessRating.KEEP_APART)
        assert state.get_rating("pack", "recv") == ClosenessRating.KEEP_APART
        rel = state.relationships[0]
        assert (rel.activity_a_id, rel.activity_b_id) == ("pack", "recv")

    def test_clear(self, state):
        state.set_relationship("recv", "pack", ClosenessRating.KEEP_APART)
        state.clear_relationship("pack", "recv")
        assert state.get_rating("recv", "pack") == ClosenessRating.DOES_NOT_MATTER

    def test_sequence_suggestions(self, state):
        state.apply_sequence_suggestions()
        assert state.get_rating("recv", "pack") == ClosenessRating.MUST_BE_CLOSE
        assert state.rating_progress() == (1, 3)


# =============================================================================
# SNAPSHOT AND SCORING
# =============================================================================

class TestScoring:
    """Test snapshot() and score()."""

    def test_snapshot_is_frozen_copy(self, state):
        snapshot = state.snapshot()
        state.add_zone(Zone(id="z1", grid_x=0, grid_y=0, grid_width=1, grid_height=1))
        assert snapshot.zones == ()

    def test_dismiss_does_not_change_score(self, state):
        state.add_corridor(Corridor(id="f1", kind=CorridorKind.FORKLIFT, points=(Point(0, 5), Point(9, 5))))
        before = state.score()
        state.dismiss_flag("path-narrow-corridor-f1")
        after = state.score()

        assert before.to_dict() == after.to_dict()
        assert "path-narrow-corridor-f1" in state.snapshot().dismissed_flags

        resolved = {f.id: f.is_dismissed for f in state.resolved_flags(after)}
        assert resolved["path-narrow-corridor-f1"] is True

        state.undismiss_flag("path-narrow-corridor-f1")
        assert state.dismissed_flags == set()

    def test_round_trip_through_snapshot(self, state):
        state.add_zone(Zone(id="z1", grid_x=0, grid_y=0, grid_width=2, grid_height=2, activity_id="recv"))
        state.set_relationship("recv", "pack", ClosenessRating.MUST_BE_CLOSE)
        copy = LayoutState.from_snapshot(state.snapshot())
        assert copy.snapshot() == state.snapshot()
        assert copy.score().to_dict() == state.score().to_dict()

    def test_summary(self, state):
        assert repr(state) == "LayoutState(10x10, 3 activities, 0 zones, 0 corridors, 0 doors)"
