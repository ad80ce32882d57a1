"""
Transporter controller with a rule-driven phase state machine.

The transporter is a single reusable logistics unit. It is dispatched from a
pickup point to a drop point, unloads, waits for a recall and finally leaves
through an exit point:

    IDLE -> INBOUND_TO_DROP -> UNLOADING -> AWAITING_RECALL -> OUTBOUND_TO_EXIT -> DEPARTED

Every transition is looked up in a rule table, so no input sequence can skip
or reorder a phase. The single exception is a forced abort, which moves any
non-terminal phase straight to DEPARTED without announcing a departure.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ...core.data import TransporterPhase, Vector2, TRANSPORTER_PHASE_NAMES
from ...core.errors import AlreadyDispatchedError, NotReadyError, UnexpectedArrivalError
from ...core.events import (
    EventPriority,
    EventType,
    LogMessage,
    MissionEvent,
    TransporterArrived,
    TransporterDeparted,
    TransporterPhaseChanged,
)

if TYPE_CHECKING:
    from ...core.events import EventManager
    from ...core.mission_state import MissionState


@dataclass
class TransporterTransitionRule:
    """Defines a transporter phase transition rule."""

    from_phase: TransporterPhase
    trigger: str
    to_phase: TransporterPhase
    description: str

    def matches(self, current_phase: TransporterPhase, trigger: str) -> bool:
        """Check if this rule matches the current conditions."""
        return self.from_phase == current_phase and self.trigger == trigger


class TransporterController:
    """Manages the mission's transporter through its logistics run."""

    def __init__(
        self,
        event_manager: "EventManager",
        state: "MissionState",
        transporter_id: str = "transporter",
        exit_point: Optional[Vector2] = None,
        hold_cargo: bool = False,
        arrival_radius: int = 0,
    ):
        """Initialize the transporter controller.

        Args:
            event_manager: Event manager for phase events and logs
            state: Mission state (for the mission clock)
            transporter_id: Identifier reported in events
            exit_point: Default exit used by recall()
            hold_cargo: Stay in UNLOADING until release_cargo() is called
            arrival_radius: Manhattan tolerance when matching arrivals
        """
        self.event_manager = event_manager
        self.state = state
        self.transporter_id = transporter_id
        self.hold_cargo = hold_cargo
        self.arrival_radius = arrival_radius

        self.phase = TransporterPhase.IDLE
        self.pickup: Optional[Vector2] = None
        self.drop: Optional[Vector2] = None
        self.exit: Optional[Vector2] = exit_point
        self.phase_history: list[TransporterPhase] = [TransporterPhase.IDLE]
        self.aborted = False
        self._departure_announced = False

        self.rules: list[TransporterTransitionRule] = []
        self._setup_transitions()

        self.event_manager.subscribe(
            EventType.TRANSPORTER_ARRIVED,
            self._on_arrived,
            subscriber_name="TransporterController.transporter_arrived",
        )

    def _setup_transitions(self) -> None:
        """Set up the legal phase transitions."""
        self.rules = [
            TransporterTransitionRule(
                TransporterPhase.IDLE, "dispatch", TransporterPhase.INBOUND_TO_DROP,
                "Transporter dispatched to the drop point",
            ),
            TransporterTransitionRule(
                TransporterPhase.INBOUND_TO_DROP, "arrive_drop", TransporterPhase.UNLOADING,
                "Transporter landed at the drop point",
            ),
            TransporterTransitionRule(
                TransporterPhase.UNLOADING, "release_cargo", TransporterPhase.AWAITING_RECALL,
                "Cargo released",
            ),
            TransporterTransitionRule(
                TransporterPhase.AWAITING_RECALL, "recall", TransporterPhase.OUTBOUND_TO_EXIT,
                "Transporter recalled to the exit point",
            ),
            TransporterTransitionRule(
                TransporterPhase.OUTBOUND_TO_EXIT, "arrive_exit", TransporterPhase.DEPARTED,
                "Transporter left the map",
            ),
        ]

    def _emit_log(self, message: str, level: str = "DEBUG") -> None:
        """Emit a log message event."""
        self.event_manager.publish(
            LogMessage(
                mission_time=self.state.mission_time,
                message=message,
                category="TRANSPORTER",
                level=level,
                source="TransporterController",
            ),
            priority=EventPriority.LOW,
            source="TransporterController",
        )

    def _find_rule(self, trigger: str) -> Optional[TransporterTransitionRule]:
        for rule in self.rules:
            if rule.matches(self.phase, trigger):
                return rule
        return None

    def _transition(self, rule: TransporterTransitionRule) -> None:
        old_phase = self.phase
        self.phase = rule.to_phase
        self.phase_history.append(rule.to_phase)

        self.event_manager.publish(
            TransporterPhaseChanged(
                mission_time=self.state.mission_time,
                transporter_id=self.transporter_id,
                old_phase=old_phase,
                new_phase=rule.to_phase,
            ),
            source="TransporterController",
        )
        self._emit_log(
            f"{rule.description}: {TRANSPORTER_PHASE_NAMES[old_phase]} -> "
            f"{TRANSPORTER_PHASE_NAMES[rule.to_phase]}",
            level="INFO",
        )

        if rule.to_phase == TransporterPhase.DEPARTED and not self._departure_announced:
            self._departure_announced = True
            self.event_manager.publish(
                TransporterDeparted(
                    mission_time=self.state.mission_time,
                    transporter_id=self.transporter_id,
                ),
                source="TransporterController",
            )

    # Requests

    def dispatch(self, pickup: Vector2, drop: Vector2) -> None:
        """Send the transporter from the pickup point to the drop point.

        Raises:
            AlreadyDispatchedError: If the transporter is not idle
        """
        rule = self._find_rule("dispatch")
        if rule is None:
            raise AlreadyDispatchedError(TRANSPORTER_PHASE_NAMES[self.phase])
        self.pickup = pickup
        self.drop = drop
        self._transition(rule)

    def release_cargo(self) -> None:
        """Finish unloading a held cargo.

        Raises:
            NotReadyError: If the transporter is not unloading
        """
        rule = self._find_rule("release_cargo")
        if rule is None:
            raise NotReadyError(TRANSPORTER_PHASE_NAMES[self.phase], action="release cargo")
        self._transition(rule)

    def recall(self, exit_point: Optional[Vector2] = None) -> None:
        """Send the waiting transporter to the exit point.

        Args:
            exit_point: Exit coordinate; defaults to the configured exit

        Raises:
            NotReadyError: If the transporter is not awaiting recall or no exit is known
        """
        rule = self._find_rule("recall")
        if rule is None:
            raise NotReadyError(TRANSPORTER_PHASE_NAMES[self.phase])
        target = exit_point or self.exit
        if target is None:
            raise NotReadyError(TRANSPORTER_PHASE_NAMES[self.phase], action="recall without an exit point")
        self.exit = target
        self._transition(rule)

    def arrive(self, position: Vector2) -> None:
        """Handle an arrival reported by the host.

        Raises:
            UnexpectedArrivalError: If the transporter is not in flight or the
                position does not match its destination
        """
        if self.phase == TransporterPhase.INBOUND_TO_DROP:
            destination, trigger = self.drop, "arrive_drop"
        elif self.phase == TransporterPhase.OUTBOUND_TO_EXIT:
            destination, trigger = self.exit, "arrive_exit"
        else:
            raise UnexpectedArrivalError(
                f"Transporter is not in flight (phase: {TRANSPORTER_PHASE_NAMES[self.phase]})"
            )

        if destination is None or position.manhattan_distance_to(destination) > self.arrival_radius:
            raise UnexpectedArrivalError(
                f"Transporter arrived at {position}, expected {destination}"
            )

        rule = self._find_rule(trigger)
        if rule is None:
            raise UnexpectedArrivalError(f"No transition for {trigger} in phase {TRANSPORTER_PHASE_NAMES[self.phase]}")
        self._transition(rule)

        if self.phase == TransporterPhase.UNLOADING and not self.hold_cargo:
            self.release_cargo()

    def force_abort(self) -> bool:
        """Ground the transporter for a mission abort.

        Moves any non-terminal phase to DEPARTED without TransporterDeparted.

        Returns:
            True if the phase changed
        """
        if self.phase == TransporterPhase.DEPARTED:
            return False
        old_phase = self.phase
        self.phase = TransporterPhase.DEPARTED
        self.phase_history.append(TransporterPhase.DEPARTED)
        self.aborted = True
        self._departure_announced = True
        self.event_manager.publish(
            TransporterPhaseChanged(
                mission_time=self.state.mission_time,
                transporter_id=self.transporter_id,
                old_phase=old_phase,
                new_phase=TransporterPhase.DEPARTED,
            ),
            source="TransporterController",
        )
        self._emit_log("Transporter run aborted", level="WARNING")
        return True

    @property
    def has_departed(self) -> bool:
        return self.phase == TransporterPhase.DEPARTED

    def _on_arrived(self, event: MissionEvent) -> None:
        """Handle TransporterArrived events; bad reports are logged and dropped."""
        if not isinstance(event, TransporterArrived):
            return
        try:
            self.arrive(event.position)
        except UnexpectedArrivalError as e:
            self._emit_log(f"Arrival rejected: {e}", level="WARNING")
