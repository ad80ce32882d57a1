"""Mutable mission state owned by a single mission session.

Tracks the mission clock, the live unit roster per faction and which units
currently occupy which zones. Managers update it from host input events;
conditions only ever see it through MissionView.
"""

from collections import defaultdict
from dataclasses import dataclass, field

from .data import Faction


@dataclass
class MissionState:
    """Live roster, zone occupancy and clock for one mission."""

    mission_time: float = 0.0
    units: dict[str, Faction] = field(default_factory=dict)
    destroyed: dict[str, Faction] = field(default_factory=dict)
    fielded: dict[Faction, int] = field(default_factory=lambda: defaultdict(int))
    occupancy: dict[str, dict[str, Faction]] = field(default_factory=lambda: defaultdict(dict))

    def advance_clock(self, delta: float) -> None:
        if delta < 0:
            raise ValueError(f"Elapsed time must be non-negative, got {delta}")
        self.mission_time += delta

    def add_unit(self, unit_id: str, faction: Faction) -> bool:
        """Add a live unit. Returns False if the unit is already known."""
        if unit_id in self.units or unit_id in self.destroyed:
            return False
        self.units[unit_id] = faction
        self.fielded[faction] += 1
        return True

    def remove_unit(self, unit_id: str, faction: Faction) -> bool:
        """Mark a unit destroyed and drop it from every zone.

        Units the roster never saw are recorded too, so a destruction reported
        before the spawn is not lost.

        Returns:
            True if this is the first destruction report for the unit
        """
        if unit_id in self.destroyed:
            return False
        known_faction = self.units.pop(unit_id, None)
        if known_faction is None:
            self.fielded[faction] += 1
        self.destroyed[unit_id] = known_faction if known_faction is not None else faction
        for occupants in self.occupancy.values():
            occupants.pop(unit_id, None)
        return True

    def enter_zone(self, zone_id: str, unit_id: str, faction: Faction) -> None:
        if unit_id in self.destroyed:
            return
        self.occupancy[zone_id][unit_id] = faction

    def leave_zone(self, zone_id: str, unit_id: str) -> None:
        self.occupancy[zone_id].pop(unit_id, None)

    def count_units(self, faction: Faction) -> int:
        return sum(1 for unit_faction in self.units.values() if unit_faction == faction)
