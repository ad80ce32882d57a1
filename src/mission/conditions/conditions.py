"""Win/loss conditions for mission policies.

This module contains the condition implementations that policies combine into
victory and defeat sets. Conditions use an event-driven architecture: the
evaluator routes only the events a condition declares interest in, and the
condition latches to SATISFIED once its trigger is observed.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Callable, Optional

from ...core.data import ConditionStatus, Faction, MissionResult
from ...core.events import (
    ConditionContext,
    EventType,
    TimerExpired,
    TransporterDeparted,
    UnitDestroyed,
    UnitEnteredZone,
)
from ...core.mission_view import MissionView


@dataclass
class Condition(ABC):
    """Base class for all win/loss conditions.

    Event-Driven Interface:
    - conditions subscribe to specific event types via 'interests' property
    - conditions receive events via 'on_event(context)' method
    - conditions can implement 'recompute(view)' to align with current state
    - conditions can implement 'poll(view)' to be re-checked at every evaluation
    """

    description: str
    status: ConditionStatus = ConditionStatus.PENDING

    @property
    def interests(self) -> tuple[EventType, ...]:
        """Return the event types this condition is interested in."""
        return ()

    @property
    def is_satisfied(self) -> bool:
        return self.status == ConditionStatus.SATISFIED

    def satisfy(self) -> None:
        self.status = ConditionStatus.SATISFIED

    def on_event(self, context: ConditionContext) -> None:
        """Handle a mission event and update condition status."""
        _ = context

    def recompute(self, view: MissionView) -> ConditionStatus:
        """Recompute status from current mission state (called at configure)."""
        _ = view
        return self.status

    def poll(self, view: MissionView) -> None:
        """Re-check the condition at an evaluation point."""
        _ = view


class TransporterDepartedCondition(Condition):
    """Satisfied when the transporter leaves through its exit."""

    def __init__(self, description: str = "Evacuate the transporter"):
        super().__init__(description)

    @property
    def interests(self) -> tuple[EventType, ...]:
        return (EventType.TRANSPORTER_DEPARTED,)

    def on_event(self, context: ConditionContext) -> None:
        if isinstance(context.event, TransporterDeparted):
            self.satisfy()


class TimerExpiredCondition(Condition):
    """Satisfied when the mission countdown runs out."""

    def __init__(self, description: str = "Mission timer expired"):
        super().__init__(description)

    @property
    def interests(self) -> tuple[EventType, ...]:
        return (EventType.TIMER_EXPIRED,)

    def on_event(self, context: ConditionContext) -> None:
        if isinstance(context.event, TimerExpired):
            self.satisfy()

    def recompute(self, view: MissionView) -> ConditionStatus:
        if view.timer_expired:
            self.satisfy()
        return self.status


class FactionEliminatedCondition(Condition):
    """Satisfied when a faction that fielded units has none left."""

    def __init__(self, faction: Faction, description: Optional[str] = None):
        super().__init__(description or f"All {faction.name.lower()} units destroyed")
        self.faction = faction

    @property
    def interests(self) -> tuple[EventType, ...]:
        return (EventType.UNIT_SPAWNED, EventType.UNIT_DESTROYED)

    def on_event(self, context: ConditionContext) -> None:
        self.recompute(context.view)

    def recompute(self, view: MissionView) -> ConditionStatus:
        if view.units_fielded(self.faction) > 0 and view.count_units(self.faction) <= 0:
            self.satisfy()
        return self.status


class UnitDestroyedCondition(Condition):
    """Satisfied when a specific unit is destroyed."""

    def __init__(self, unit_id: str, description: Optional[str] = None):
        super().__init__(description or f"Unit '{unit_id}' destroyed")
        self.unit_id = unit_id

    @property
    def interests(self) -> tuple[EventType, ...]:
        return (EventType.UNIT_DESTROYED,)

    def on_event(self, context: ConditionContext) -> None:
        if isinstance(context.event, UnitDestroyed) and context.event.unit_id == self.unit_id:
            self.satisfy()

    def recompute(self, view: MissionView) -> ConditionStatus:
        if view.is_unit_destroyed(self.unit_id):
            self.satisfy()
        return self.status


class ZoneCapturedCondition(Condition):
    """Satisfied when a unit of a faction stands in a zone."""

    def __init__(self, zone_id: str, faction: Faction, description: Optional[str] = None):
        super().__init__(description or f"Zone '{zone_id}' captured by {faction.name.lower()}")
        self.zone_id = zone_id
        self.faction = faction

    @property
    def interests(self) -> tuple[EventType, ...]:
        return (EventType.UNIT_ENTERED_ZONE,)

    def on_event(self, context: ConditionContext) -> None:
        event = context.event
        if isinstance(event, UnitEnteredZone) and event.zone_id == self.zone_id:
            if context.view.is_zone_held_by(self.zone_id, self.faction):
                self.satisfy()

    def recompute(self, view: MissionView) -> ConditionStatus:
        if view.is_zone_held_by(self.zone_id, self.faction):
            self.satisfy()
        return self.status


MissionPredicate = Callable[[MissionView], MissionResult]


class PredicateVerdict:
    """Latest answer of a named external predicate.

    The victory and defeat conditions of a Custom policy share one verdict,
    so the predicate runs once per evaluation point.
    """

    def __init__(self, predicate_id: str, predicate: MissionPredicate):
        self.predicate_id = predicate_id
        self.predicate = predicate
        self.result = MissionResult.UNDECIDED

    def refresh(self, view: MissionView) -> MissionResult:
        self.result = self.predicate(view)
        return self.result


class PredicateCondition(Condition):
    """Satisfied when a predicate verdict reports the target result.

    The verdict is refreshed at every evaluation point (every host tick or
    input), not only on routed events.
    """

    def __init__(
        self,
        verdict: PredicateVerdict,
        target: MissionResult,
        description: Optional[str] = None,
    ):
        super().__init__(description or f"Predicate '{verdict.predicate_id}' reports {target.name.lower()}")
        self.verdict = verdict
        self.target = target

    def poll(self, view: MissionView) -> None:
        if self.verdict.result == self.target:
            self.satisfy()
