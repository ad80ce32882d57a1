"""Centralized mission enums and constants.

This module contains all core mission enums that are used across multiple modules,
eliminating duplication and providing a single source of truth.
"""

from enum import Enum, auto
from typing import Union


class Faction(Enum):
    """Faction (player slot) affiliations for units and zone restrictions."""
    PLAYER = 0
    ENEMY = 1
    ALLY = 2
    NEUTRAL = 3


class TransporterPhase(Enum):
    """Phases of the transporter logistics run, in their only legal order."""
    IDLE = 0
    INBOUND_TO_DROP = 1
    UNLOADING = 2
    AWAITING_RECALL = 3
    OUTBOUND_TO_EXIT = 4
    DEPARTED = 5


class CueKind(Enum):
    """Kinds of narrative cue."""
    BRIEFING = auto()    # Campaign message (CAMP_MSG)
    IN_MISSION = auto()  # Mission message (MISS_MSG)


class MissionResult(Enum):
    """Terminal (or not yet terminal) result of a mission."""
    UNDECIDED = auto()
    VICTORY = auto()
    DEFEAT = auto()


class EvaluationMode(Enum):
    """Win/loss evaluation modes."""
    PRE_OFFWORLD = auto()
    STANDARD = auto()
    CUSTOM = auto()


class ConditionStatus(Enum):
    """Status of a single win/loss condition."""
    PENDING = auto()
    SATISFIED = auto()


class SessionState(Enum):
    """Lifecycle of a mission session."""
    CREATED = auto()
    RUNNING = auto()
    CONCLUDED = auto()
    FAILED = auto()


class DifficultyTier(Enum):
    """Campaign difficulty tiers, resolved to scalars by the campaign shell."""
    SUPER_EASY = auto()
    EASY = auto()
    MEDIUM = auto()
    HARD = auto()
    INSANE = auto()


# Display names
FACTION_NAMES = {
    Faction.PLAYER: "Player",
    Faction.ENEMY: "Enemy",
    Faction.ALLY: "Ally",
    Faction.NEUTRAL: "Neutral",
}

TRANSPORTER_PHASE_NAMES = {
    TransporterPhase.IDLE: "Idle",
    TransporterPhase.INBOUND_TO_DROP: "Inbound to drop",
    TransporterPhase.UNLOADING: "Unloading",
    TransporterPhase.AWAITING_RECALL: "Awaiting recall",
    TransporterPhase.OUTBOUND_TO_EXIT: "Outbound to exit",
    TransporterPhase.DEPARTED: "Departed",
}


FACTION_ALIASES = {
    "CAM_HUMAN_PLAYER": Faction.PLAYER,
    "HUMAN": Faction.PLAYER,
}


def parse_faction(value: Union[Faction, str, int]) -> Faction:
    """Parse a faction from an enum, a name (case-insensitive) or a player slot."""
    if isinstance(value, Faction):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid faction: {value!r}")
    if isinstance(value, int):
        try:
            return Faction(value)
        except ValueError:
            raise ValueError(f"Invalid faction slot: {value}") from None
    key = str(value).strip().upper()
    if key in FACTION_ALIASES:
        return FACTION_ALIASES[key]
    try:
        return Faction[key]
    except KeyError:
        raise ValueError(f"Invalid faction: {value!r}") from None
