"""Event system for publisher-subscriber communication.

This package contains the complete event-driven architecture:
- event_manager.py: Publisher-subscriber event routing and coordination
- events.py: Event definitions for host and inter-system communication
"""

from .event_manager import EventManager, EventPriority, QueuedEvent
from .events import (
    MissionEvent,
    EventType,
    ConditionContext,
    TimeElapsed,
    UnitSpawned,
    UnitDestroyed,
    UnitEnteredZone,
    UnitLeftZone,
    TransporterArrived,
    CuePlaybackComplete,
    PlayerAborted,
    ZoneRestrictionViolation,
    ZoneRestrictionLifted,
    TimerStarted,
    TimerCancelled,
    TimerExpired,
    TransporterPhaseChanged,
    TransporterDeparted,
    CueRequested,
    NarrativeSkipped,
    MissionStarted,
    MissionConcluded,
    LogMessage,
)

__all__ = [
    "EventManager",
    "EventPriority",
    "QueuedEvent",
    "MissionEvent",
    "EventType",
    "ConditionContext",
    "TimeElapsed",
    "UnitSpawned",
    "UnitDestroyed",
    "UnitEnteredZone",
    "UnitLeftZone",
    "TransporterArrived",
    "CuePlaybackComplete",
    "PlayerAborted",
    "ZoneRestrictionViolation",
    "ZoneRestrictionLifted",
    "TimerStarted",
    "TimerCancelled",
    "TimerExpired",
    "TransporterPhaseChanged",
    "TransporterDeparted",
    "CueRequested",
    "NarrativeSkipped",
    "MissionStarted",
    "MissionConcluded",
    "LogMessage",
]
