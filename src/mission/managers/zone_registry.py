"""Zone registry for named map regions and no-go restrictions.

Zones are registered while the mission is being set up and the registry is
sealed when the mission starts. After that only zones registered as dynamic may
change, and the only change is lifting their restriction.

Entry and exit reports from the host keep the zone occupancy in MissionState
current; an entry by a restricted faction produces a ZoneRestrictionViolation
for the host to act on.
"""

from dataclasses import dataclass, replace
from typing import Optional, TYPE_CHECKING

import numpy as np

from ...core.data import Faction, Rect, Vector2, VectorArray
from ...core.errors import (
    DuplicateZoneError,
    InvalidGeometryError,
    RegistrySealedError,
    StaticZoneError,
    UnknownZoneError,
)
from ...core.events import (
    EventPriority,
    EventType,
    LogMessage,
    MissionEvent,
    UnitEnteredZone,
    UnitLeftZone,
    ZoneRestrictionLifted,
    ZoneRestrictionViolation,
)

if TYPE_CHECKING:
    from ...core.events import EventManager
    from ...core.mission_state import MissionState


@dataclass(frozen=True)
class Zone:
    """A registered rectangular zone."""
    zone_id: str
    rect: Rect
    restricted_faction: Optional[Faction] = None
    dynamic: bool = False

    @property
    def is_no_go(self) -> bool:
        return self.restricted_faction is not None


class ZoneRegistry:
    """Stores named zones and answers containment and restriction queries."""

    def __init__(
        self,
        event_manager: "EventManager",
        state: "MissionState",
        map_size: Optional[tuple[int, int]] = None,
    ):
        """Initialize the zone registry.

        Args:
            event_manager: Event manager for publishing violations and logs
            state: Mission state whose zone occupancy this registry maintains
            map_size: Optional (width, height) used for validity checks
        """
        self.event_manager = event_manager
        self.state = state
        self.map_size = map_size
        self._zones: dict[str, Zone] = {}
        self._sealed = False

        # Batch containment cache: row i holds bounds of zone _zone_ids[i]
        self._zone_ids: list[str] = []
        self._bounds = np.empty((0, 4), dtype=np.int32)

        self._subscribe_to_events()

    def _subscribe_to_events(self) -> None:
        self.event_manager.subscribe(
            EventType.UNIT_ENTERED_ZONE,
            self._on_unit_entered,
            subscriber_name="ZoneRegistry.unit_entered_zone",
        )
        self.event_manager.subscribe(
            EventType.UNIT_LEFT_ZONE,
            self._on_unit_left,
            subscriber_name="ZoneRegistry.unit_left_zone",
        )

    def _emit_log(self, message: str, level: str = "DEBUG") -> None:
        """Emit a log message event."""
        self.event_manager.publish(
            LogMessage(
                mission_time=self.state.mission_time,
                message=message,
                category="ZONE",
                level=level,
                source="ZoneRegistry",
            ),
            priority=EventPriority.LOW,
            source="ZoneRegistry",
        )

    # Registration

    def register_zone(
        self,
        zone_id: str,
        rect: Rect,
        restricted_faction: Optional[Faction] = None,
        dynamic: bool = False,
    ) -> Zone:
        """Register a zone.

        Args:
            zone_id: Unique zone identifier
            rect: Inclusive rectangle
            restricted_faction: Faction whose units may not enter, if any
            dynamic: Whether the restriction may be lifted after start

        Returns:
            The registered zone

        Raises:
            RegistrySealedError: If the mission already started
            DuplicateZoneError: If the id is taken
            InvalidGeometryError: If min > max on either axis or the zone is off the map
        """
        if self._sealed:
            raise RegistrySealedError(zone_id)
        if zone_id in self._zones:
            raise DuplicateZoneError(zone_id)
        if rect.min_x > rect.max_x:
            raise InvalidGeometryError(zone_id, f"min x {rect.min_x} > max x {rect.max_x}")
        if rect.min_y > rect.max_y:
            raise InvalidGeometryError(zone_id, f"min y {rect.min_y} > max y {rect.max_y}")
        if self.map_size is not None:
            corners = (Vector2(rect.min_y, rect.min_x), Vector2(rect.max_y, rect.max_x))
            if not all(self.is_valid_point(corner) for corner in corners):
                raise InvalidGeometryError(zone_id, f"rectangle lies outside map {self.map_size}")

        zone = Zone(zone_id, rect, restricted_faction, dynamic)
        self._zones[zone_id] = zone
        self._zone_ids.append(zone_id)
        self._bounds = np.vstack([self._bounds, rect.to_numpy()[np.newaxis, :]])

        restriction = f", no-go for {restricted_faction.name}" if restricted_faction else ""
        self._emit_log(f"Registered zone '{zone_id}' {rect}{restriction}")
        return zone

    def seal(self) -> None:
        """Freeze registrations; called when the mission starts."""
        self._sealed = True

    @property
    def is_sealed(self) -> bool:
        return self._sealed

    # Queries

    def get_zone(self, zone_id: str) -> Zone:
        try:
            return self._zones[zone_id]
        except KeyError:
            raise UnknownZoneError(zone_id) from None

    def has_zone(self, zone_id: str) -> bool:
        return zone_id in self._zones

    def zone_ids(self) -> list[str]:
        return list(self._zone_ids)

    def contains(self, zone_id: str, point: Vector2) -> bool:
        """Inclusive containment of a point in a zone."""
        return self.get_zone(zone_id).rect.contains(point)

    def is_restricted(self, zone_id: str, faction: Faction) -> bool:
        """True if units of the faction may not enter the zone."""
        return self.get_zone(zone_id).restricted_faction == faction

    def is_valid_point(self, point: Vector2) -> bool:
        """True if the point lies on the map (always True without a map size)."""
        if self.map_size is None:
            return True
        width, height = self.map_size
        return 0 <= point.x < width and 0 <= point.y < height

    def zones_containing(self, point: Vector2) -> list[str]:
        """Ids of every zone containing the point, in registration order."""
        if not self._zone_ids:
            return []
        b = self._bounds
        mask = ((b[:, 0] <= point.y) & (point.y <= b[:, 2]) &
                (b[:, 1] <= point.x) & (point.x <= b[:, 3]))
        return [self._zone_ids[i] for i in np.flatnonzero(mask)]

    def points_in_zone(self, zone_id: str, points: VectorArray) -> VectorArray:
        """Subset of the given points that fall inside a zone."""
        return points.filter_by_rect(self.get_zone(zone_id).rect)

    def restricted_zones_for(self, faction: Faction) -> list[str]:
        """Ids of the zones that currently forbid the faction."""
        return [zone_id for zone_id in self._zone_ids
                if self._zones[zone_id].restricted_faction == faction]

    # Mutation of dynamic zones

    def lift_restriction(self, zone_id: str) -> Zone:
        """Remove the restriction of a dynamic zone.

        Raises:
            UnknownZoneError: If the zone is not registered
            StaticZoneError: If the zone is static and the mission has started
        """
        zone = self.get_zone(zone_id)
        if self._sealed and not zone.dynamic:
            raise StaticZoneError(zone_id)
        if zone.restricted_faction is None:
            return zone

        lifted = replace(zone, restricted_faction=None)
        self._zones[zone_id] = lifted
        self.event_manager.publish(
            ZoneRestrictionLifted(mission_time=self.state.mission_time, zone_id=zone_id),
            source="ZoneRegistry",
        )
        self._emit_log(f"Restriction lifted on zone '{zone_id}'", level="INFO")
        return lifted

    # Event handlers

    def _on_unit_entered(self, event: MissionEvent) -> None:
        if not isinstance(event, UnitEnteredZone):
            return
        if event.zone_id not in self._zones:
            self._emit_log(f"Entry reported for unknown zone '{event.zone_id}'", level="WARNING")
            return

        self.state.enter_zone(event.zone_id, event.unit_id, event.faction)

        if self.is_restricted(event.zone_id, event.faction):
            self.event_manager.publish(
                ZoneRestrictionViolation(
                    mission_time=self.state.mission_time,
                    zone_id=event.zone_id,
                    unit_id=event.unit_id,
                    faction=event.faction,
                ),
                source="ZoneRegistry",
            )
            self._emit_log(
                f"Unit '{event.unit_id}' ({event.faction.name}) violated no-go zone '{event.zone_id}'",
                level="WARNING",
            )

    def _on_unit_left(self, event: MissionEvent) -> None:
        if not isinstance(event, UnitLeftZone):
            return
        if event.zone_id not in self._zones:
            self._emit_log(f"Exit reported for unknown zone '{event.zone_id}'", level="WARNING")
            return
        self.state.leave_zone(event.zone_id, event.unit_id)
