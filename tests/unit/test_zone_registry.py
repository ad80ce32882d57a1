"""
Unit tests for the ZoneRegistry class.

Tests zone registration and validation, inclusive containment queries,
no-go restriction handling and zone occupancy tracking.
"""
import pytest
from unittest.mock import Mock

from src.core.data import Faction, Rect, Vector2, VectorArray
from src.core.errors import (
    DuplicateZoneError,
    InvalidGeometryError,
    RegistrySealedError,
    StaticZoneError,
    UnknownZoneError,
)
from src.core.events import EventType, UnitEnteredZone, UnitLeftZone
from src.mission.managers.zone_registry import ZoneRegistry

LZ = Rect.from_corners(10, 51, 12, 53)


@pytest.fixture
def registry(event_manager, mission_state):
    return ZoneRegistry(event_manager, mission_state)


def enter(event_manager, zone_id, unit_id, faction):
    event_manager.publish(UnitEnteredZone(mission_time=0.0, zone_id=zone_id, unit_id=unit_id, faction=faction))
    event_manager.drain()


class TestZoneRegistration:
    """Test zone registration and validation."""

    def test_register_zone(self, registry):
        zone = registry.register_zone("lz", LZ, Faction.PLAYER)

        assert zone.zone_id == "lz"
        assert zone.is_no_go
        assert registry.has_zone("lz")
        assert registry.get_zone("lz") == zone
        assert registry.zone_ids() == ["lz"]

    def test_duplicate_zone_rejected(self, registry):
        registry.register_zone("lz", LZ)
        with pytest.raises(DuplicateZoneError):
            registry.register_zone("lz", Rect(0, 0, 1, 1))

    def test_inverted_rect_rejected(self, registry):
        with pytest.raises(InvalidGeometryError) as exc_info:
            registry.register_zone("bad", Rect.from_corners(12, 51, 10, 53))
        assert exc_info.value.zone_id == "bad"
        assert not registry.has_zone("bad")

    def test_off_map_rect_rejected(self, event_manager, mission_state):
        registry = ZoneRegistry(event_manager, mission_state, map_size=(64, 64))
        with pytest.raises(InvalidGeometryError):
            registry.register_zone("far", Rect.from_corners(60, 60, 70, 62))

    def test_single_cell_zone_allowed(self, registry):
        registry.register_zone("cell", Rect.from_corners(5, 5, 5, 5))
        assert registry.contains("cell", Vector2(5, 5))

    def test_sealed_registry_rejects_registration(self, registry):
        registry.seal()
        assert registry.is_sealed
        with pytest.raises(RegistrySealedError):
            registry.register_zone("late", LZ)

    def test_unknown_zone(self, registry):
        with pytest.raises(UnknownZoneError):
            registry.get_zone("nowhere")


class TestZoneQueries:
    """Test containment and restriction queries."""

    @pytest.fixture
    def populated(self, registry):
        registry.register_zone("lz", LZ, Faction.PLAYER)
        registry.register_zone("base", Rect.from_corners(0, 40, 20, 60))
        registry.register_zone("far", Rect.from_corners(100, 100, 110, 110))
        return registry

    def test_contains_is_inclusive(self, populated):
        assert populated.contains("lz", Vector2.from_xy(10, 51))
        assert populated.contains("lz", Vector2.from_xy(12, 53))
        assert not populated.contains("lz", Vector2.from_xy(13, 53))

    def test_zones_containing(self, populated):
        assert populated.zones_containing(Vector2.from_xy(11, 52)) == ["lz", "base"]
        assert populated.zones_containing(Vector2.from_xy(105, 105)) == ["far"]
        assert populated.zones_containing(Vector2.from_xy(70, 70)) == []

    def test_zones_containing_empty_registry(self, registry):
        assert registry.zones_containing(Vector2(0, 0)) == []

    def test_points_in_zone(self, populated):
        points = VectorArray([Vector2.from_xy(11, 52), Vector2.from_xy(30, 30)])
        inside = populated.points_in_zone("lz", points)
        assert inside.to_vector_list() == [Vector2.from_xy(11, 52)]

    def test_is_restricted(self, populated):
        assert populated.is_restricted("lz", Faction.PLAYER)
        assert not populated.is_restricted("lz", Faction.ENEMY)
        assert not populated.is_restricted("base", Faction.PLAYER)

    def test_restricted_zones_for(self, populated):
        assert populated.restricted_zones_for(Faction.PLAYER) == ["lz"]
        assert populated.restricted_zones_for(Faction.ENEMY) == []

    def test_is_valid_point(self, event_manager, mission_state):
        registry = ZoneRegistry(event_manager, mission_state, map_size=(64, 32))
        assert registry.is_valid_point(Vector2.from_xy(63, 31))
        assert not registry.is_valid_point(Vector2.from_xy(64, 0))
        assert not registry.is_valid_point(Vector2.from_xy(0, -1))


class TestRestrictionLifting:
    """Test lifting no-go restrictions on dynamic zones."""

    def test_lift_dynamic_restriction(self, registry, event_manager):
        lifted_sub = Mock()
        event_manager.subscribe(EventType.ZONE_RESTRICTION_LIFTED, lifted_sub)
        registry.register_zone("depot", LZ, Faction.PLAYER, dynamic=True)
        registry.seal()

        zone = registry.lift_restriction("depot")
        event_manager.drain()

        assert not zone.is_no_go
        assert not registry.is_restricted("depot", Faction.PLAYER)
        lifted_sub.assert_called_once()

    def test_static_zone_cannot_change_after_start(self, registry):
        registry.register_zone("lz", LZ, Faction.PLAYER)
        registry.seal()

        with pytest.raises(StaticZoneError):
            registry.lift_restriction("lz")
        assert registry.is_restricted("lz", Faction.PLAYER)

    def test_static_zone_can_change_before_start(self, registry):
        registry.register_zone("lz", LZ, Faction.PLAYER)
        registry.lift_restriction("lz")
        assert not registry.is_restricted("lz", Faction.PLAYER)


class TestZoneOccupancy:
    """Test occupancy tracking from entry and exit reports."""

    def test_entry_and_exit_update_occupancy(self, registry, event_manager, mission_state):
        registry.register_zone("base", LZ)

        enter(event_manager, "base", "tank", Faction.PLAYER)
        assert mission_state.occupancy["base"] == {"tank": Faction.PLAYER}

        event_manager.publish(UnitLeftZone(mission_time=0.0, zone_id="base", unit_id="tank", faction=Faction.PLAYER))
        event_manager.drain()
        assert mission_state.occupancy["base"] == {}

    def test_restricted_entry_publishes_violation(self, registry, event_manager):
        violations = []
        event_manager.subscribe(EventType.ZONE_RESTRICTION_VIOLATION, violations.append)
        registry.register_zone("lz", LZ, Faction.PLAYER)

        enter(event_manager, "lz", "tank", Faction.PLAYER)
        enter(event_manager, "lz", "raider", Faction.ENEMY)

        assert len(violations) == 1
        assert violations[0].unit_id == "tank"
        assert violations[0].zone_id == "lz"

    def test_entry_into_unknown_zone_is_ignored(self, registry, event_manager, mission_state):
        enter(event_manager, "ghost", "tank", Faction.PLAYER)
        assert "ghost" not in mission_state.occupancy

    def test_destroyed_unit_does_not_enter(self, registry, event_manager, mission_state):
        registry.register_zone("base", LZ)
        mission_state.add_unit("tank", Faction.PLAYER)
        mission_state.remove_unit("tank", Faction.PLAYER)

        enter(event_manager, "base", "tank", Faction.PLAYER)

        assert mission_state.occupancy["base"] == {}
