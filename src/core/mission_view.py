"""Read-only mission view adapter for win/loss conditions.

This module provides a stable, minimal interface for conditions and custom
predicates to query mission state without coupling to the managers.

Design Principles:
- Read-only interface prevents conditions from mutating mission state
- Minimal query surface reduces coupling
- Stable contract allows the session internals to evolve
"""

from typing import Optional, TYPE_CHECKING

from .data import Faction, TransporterPhase
from .mission_state import MissionState

if TYPE_CHECKING:
    from ..mission.managers.mission_timer import MissionTimer
    from ..mission.managers.transporter_controller import TransporterController


class MissionView:
    """Read-only facade over mission state for condition queries."""

    def __init__(
        self,
        state: MissionState,
        timer: Optional["MissionTimer"] = None,
        transporter: Optional["TransporterController"] = None,
    ):
        self._state = state
        self._timer = timer
        self._transporter = transporter

    @property
    def mission_time(self) -> float:
        """Seconds elapsed since mission start."""
        return self._state.mission_time

    def count_units(self, faction: Faction) -> int:
        """Number of live units of a faction."""
        return self._state.count_units(faction)

    def units_fielded(self, faction: Faction) -> int:
        """Number of units the faction has fielded over the whole mission."""
        return self._state.fielded.get(faction, 0)

    def is_unit_alive(self, unit_id: str) -> bool:
        return unit_id in self._state.units

    def is_unit_destroyed(self, unit_id: str) -> bool:
        return unit_id in self._state.destroyed

    def units_in_zone(self, zone_id: str, faction: Optional[Faction] = None) -> list[str]:
        """Unit ids inside a zone, optionally limited to one faction."""
        occupants = self._state.occupancy.get(zone_id, {})
        return sorted(
            unit_id for unit_id, unit_faction in occupants.items()
            if faction is None or unit_faction == faction
        )

    def is_zone_held_by(self, zone_id: str, faction: Faction) -> bool:
        """True if at least one unit of the faction stands in the zone."""
        return bool(self.units_in_zone(zone_id, faction))

    @property
    def timer_remaining(self) -> Optional[float]:
        """Remaining countdown seconds, or None when no timer was started."""
        if self._timer is None or not self._timer.has_started:
            return None
        return self._timer.remaining

    @property
    def timer_expired(self) -> bool:
        return self._timer is not None and self._timer.expired

    @property
    def transporter_phase(self) -> Optional[TransporterPhase]:
        if self._transporter is None:
            return None
        return self._transporter.phase
