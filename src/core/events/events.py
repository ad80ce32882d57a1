"""Mission events and context.

This module defines all mission events that managers can subscribe to.
Input events are pushed by the host engine; output events are consumed by it.

Event Design Principles:
- Events are immutable dataclasses
- All events include the mission_time (seconds since mission start) at emission
- Events use proper enums instead of magic strings
- Keep event types focused and avoid over-granular events
"""

from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING
from abc import ABC
from enum import Enum, auto

from ..data import Faction, TransporterPhase, CueKind, Vector2

if TYPE_CHECKING:
    from ..mission_view import MissionView
    from ...mission.conditions.outcome import MissionOutcome


class EventType(Enum):
    """Types of mission events that managers can subscribe to."""
    # Host input events
    TIME_ELAPSED = auto()
    UNIT_SPAWNED = auto()
    UNIT_DESTROYED = auto()
    UNIT_ENTERED_ZONE = auto()
    UNIT_LEFT_ZONE = auto()
    TRANSPORTER_ARRIVED = auto()
    CUE_PLAYBACK_COMPLETE = auto()
    PLAYER_ABORTED = auto()

    # Zone events
    ZONE_RESTRICTION_VIOLATION = auto()
    ZONE_RESTRICTION_LIFTED = auto()

    # Timer events
    TIMER_STARTED = auto()
    TIMER_CANCELLED = auto()
    TIMER_EXPIRED = auto()

    # Transporter events
    TRANSPORTER_PHASE_CHANGED = auto()
    TRANSPORTER_DEPARTED = auto()

    # Narrative events
    CUE_REQUESTED = auto()
    NARRATIVE_SKIPPED = auto()

    # Mission lifecycle events
    MISSION_STARTED = auto()
    MISSION_CONCLUDED = auto()

    # Logging events
    LOG_MESSAGE = auto()


@dataclass(frozen=True)
class MissionEvent(ABC):
    """Base class for all mission events."""
    mission_time: float
    event_type: EventType = field(init=False)


# Host input events
@dataclass(frozen=True)
class TimeElapsed(MissionEvent):
    """Event pushed by the host each tick with the elapsed seconds."""
    delta: float

    def __post_init__(self):
        # Set event_type since dataclass frozen=True prevents normal assignment
        object.__setattr__(self, 'event_type', EventType.TIME_ELAPSED)


@dataclass(frozen=True)
class UnitSpawned(MissionEvent):
    """Event emitted when a unit joins the mission."""
    unit_id: str
    faction: Faction

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_SPAWNED)


@dataclass(frozen=True)
class UnitDestroyed(MissionEvent):
    """Event emitted when a unit is destroyed."""
    unit_id: str
    faction: Faction

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_DESTROYED)


@dataclass(frozen=True)
class UnitEnteredZone(MissionEvent):
    """Event emitted when a unit enters a registered zone."""
    zone_id: str
    unit_id: str
    faction: Faction

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_ENTERED_ZONE)


@dataclass(frozen=True)
class UnitLeftZone(MissionEvent):
    """Event emitted when a unit leaves a registered zone."""
    zone_id: str
    unit_id: str
    faction: Faction

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_LEFT_ZONE)


@dataclass(frozen=True)
class TransporterArrived(MissionEvent):
    """Event emitted when the transporter reaches a coordinate."""
    position: Vector2

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.TRANSPORTER_ARRIVED)


@dataclass(frozen=True)
class CuePlaybackComplete(MissionEvent):
    """Event emitted when the host finished playing a narrative cue."""
    cue_id: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.CUE_PLAYBACK_COMPLETE)


@dataclass(frozen=True)
class PlayerAborted(MissionEvent):
    """Event emitted when the player abandons the mission."""
    reason: str = "player_abort"

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.PLAYER_ABORTED)


# Zone events
@dataclass(frozen=True)
class ZoneRestrictionViolation(MissionEvent):
    """Event emitted when a restricted faction's unit enters a no-go zone."""
    zone_id: str
    unit_id: str
    faction: Faction

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ZONE_RESTRICTION_VIOLATION)


@dataclass(frozen=True)
class ZoneRestrictionLifted(MissionEvent):
    """Event emitted when a dynamic zone's restriction is removed."""
    zone_id: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ZONE_RESTRICTION_LIFTED)


# Timer events
@dataclass(frozen=True)
class TimerStarted(MissionEvent):
    """Event emitted when the mission countdown starts."""
    duration: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.TIMER_STARTED)


@dataclass(frozen=True)
class TimerCancelled(MissionEvent):
    """Event emitted when the mission countdown is stopped without firing."""
    remaining: float

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.TIMER_CANCELLED)


@dataclass(frozen=True)
class TimerExpired(MissionEvent):
    """Event emitted once when the mission countdown reaches zero."""
    duration: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.TIMER_EXPIRED)


# Transporter events
@dataclass(frozen=True)
class TransporterPhaseChanged(MissionEvent):
    """Event emitted on every transporter phase transition."""
    transporter_id: str
    old_phase: TransporterPhase
    new_phase: TransporterPhase

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.TRANSPORTER_PHASE_CHANGED)


@dataclass(frozen=True)
class TransporterDeparted(MissionEvent):
    """Event emitted once when the transporter leaves through the exit."""
    transporter_id: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.TRANSPORTER_DEPARTED)


# Narrative events
@dataclass(frozen=True)
class CueRequested(MissionEvent):
    """Event emitted when the host should play a narrative cue."""
    cue_id: str
    kind: CueKind
    blocking: bool

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.CUE_REQUESTED)


@dataclass(frozen=True)
class NarrativeSkipped(MissionEvent):
    """Event emitted when the remaining narrative queue is discarded."""
    skipped_cue_ids: tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.NARRATIVE_SKIPPED)


# Mission lifecycle events
@dataclass(frozen=True)
class MissionStarted(MissionEvent):
    """Event emitted when a session has wired its configuration."""
    mission_id: str
    start_view: Optional[Vector2] = None

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.MISSION_STARTED)


@dataclass(frozen=True)
class MissionConcluded(MissionEvent):
    """Event emitted exactly once when the mission outcome is decided."""
    outcome: "MissionOutcome"

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.MISSION_CONCLUDED)


# Logging events
@dataclass(frozen=True)
class LogMessage(MissionEvent):
    """Event emitted when a log message is created."""
    message: str
    category: str
    level: str
    source: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.LOG_MESSAGE)


@dataclass
class ConditionContext:
    """Context provided to win/loss conditions when handling events.

    This context provides:
    1. The event that triggered the condition update
    2. A read-only view of the mission state for queries
    """
    event: MissionEvent
    view: "MissionView"
