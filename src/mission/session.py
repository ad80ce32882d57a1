"""Mission session: the aggregate root of one running mission.

The session owns the mission state and one instance of every manager for the
lifetime of a mission. It wires the configuration into them at start(),
exposes the host-facing input methods, and reports the terminal outcome.

Every host input is handled the same way: publish the input event, drain the
bus (including events raised by handlers), then let the evaluator settle the
outcome once. Inputs arriving after the mission concluded are ignored.
"""

from typing import Any, Callable, Optional

from ..core.data import Faction, MissionResult, SessionState, Vector2
from ..core.errors import InvalidGeometryError, MissionConfigError, MissionStateError, SessionStateError
from ..core.events import (
    CuePlaybackComplete,
    EventManager,
    EventPriority,
    EventType,
    LogMessage,
    MissionConcluded,
    MissionEvent,
    MissionStarted,
    PlayerAborted,
    TimeElapsed,
    TransporterArrived,
    UnitDestroyed,
    UnitEnteredZone,
    UnitLeftZone,
    UnitSpawned,
)
from ..core.mission_state import MissionState
from ..core.mission_view import MissionView
from .conditions.outcome import MissionOutcome
from .conditions.policies import PredicateRegistry
from .config.mission_config import MissionConfig
from .managers.log_manager import LogManager
from .managers.mission_timer import MissionTimer
from .managers.narrative_sequencer import NarrativeSequencer
from .managers.transporter_controller import TransporterController
from .managers.win_loss_evaluator import WinLossEvaluator
from .managers.zone_registry import ZoneRegistry


class MissionSession:
    """Runs one mission from setup to a terminal outcome."""

    def __init__(
        self,
        config: MissionConfig,
        difficulty_multiplier: float = 1.0,
        predicates: Optional[PredicateRegistry] = None,
        event_manager: Optional[EventManager] = None,
        log_echo: Optional[Callable[[str], None]] = None,
    ):
        """Create the session and its managers.

        Args:
            config: Immutable mission configuration
            difficulty_multiplier: Timer scale resolved by the campaign shell
            predicates: External predicates for Custom policies
            event_manager: Bus to use (a private one is created by default)
            log_echo: Optional callback receiving visible log lines
        """
        if difficulty_multiplier <= 0:
            raise ValueError(f"Difficulty multiplier must be positive, got {difficulty_multiplier}")

        self.config = config
        self.difficulty_multiplier = difficulty_multiplier
        self.event_manager = event_manager or EventManager()
        self.state = MissionState()
        self.session_state = SessionState.CREATED
        self._settling = False

        self.log_manager = LogManager(self.event_manager, echo=log_echo)

        # Roster handlers subscribe before any condition so conditions see updated state
        self.event_manager.subscribe(EventType.UNIT_SPAWNED, self._on_unit_spawned,
                                     subscriber_name="MissionSession.unit_spawned")
        self.event_manager.subscribe(EventType.UNIT_DESTROYED, self._on_unit_destroyed,
                                     subscriber_name="MissionSession.unit_destroyed")
        self.event_manager.subscribe(EventType.PLAYER_ABORTED, self._on_player_aborted,
                                     subscriber_name="MissionSession.player_aborted")
        self.event_manager.subscribe(EventType.MISSION_CONCLUDED, self._on_mission_concluded,
                                     subscriber_name="MissionSession.mission_concluded")

        self.zones = ZoneRegistry(self.event_manager, self.state, config.map_size)
        self.timer = MissionTimer(self.event_manager, self.state)
        self.transporter: Optional[TransporterController] = None
        if config.transporter is not None:
            self.transporter = TransporterController(
                self.event_manager,
                self.state,
                transporter_id=config.transporter.transporter_id,
                hold_cargo=config.transporter.hold_cargo,
            )
        self.narrative = NarrativeSequencer(
            self.event_manager,
            self.state,
            auto_advance=config.narrative_options.auto_advance,
        )
        self.view = MissionView(self.state, self.timer, self.transporter)
        self.evaluator = WinLossEvaluator(self.event_manager, self.state, self.view, predicates)
        self.evaluator.pause_check = self._evaluation_paused

    def _emit_log(self, message: str, level: str = "INFO", category: str = "SESSION") -> None:
        """Emit a log message event."""
        self.event_manager.publish(
            LogMessage(
                mission_time=self.state.mission_time,
                message=message,
                category=category,
                level=level,
                source="MissionSession",
            ),
            priority=EventPriority.LOW,
            source="MissionSession",
        )

    # Lifecycle

    def start(self) -> None:
        """Wire the configuration into the managers and begin the mission.

        Raises:
            SessionStateError: If the session was already started
            MissionConfigError: If the configuration is invalid; the session is
                marked FAILED and cannot be retried
        """
        if self.session_state != SessionState.CREATED:
            raise SessionStateError(f"Cannot start a session in state {self.session_state.name}")

        config = self.config
        try:
            for zone in config.zones:
                self.zones.register_zone(zone.zone_id, zone.rect, zone.restricted_faction, zone.dynamic)

            start_view = config.point(config.start_view) if config.start_view else None
            flight_plan = self._resolve_flight_plan()
            self._check_points_on_map()

            if config.timer is not None and config.timer.base_duration <= 0:
                raise MissionConfigError(
                    f"Timer duration must be positive, got {config.timer.base_duration}"
                )

            for unit_id, faction in config.units.items():
                self.state.add_unit(unit_id, faction)

            self.evaluator.configure(
                config.policy,
                self.zones.zone_ids(),
                has_transporter=self.transporter is not None,
                has_timer=config.timer is not None,
            )
        except MissionConfigError as e:
            self.session_state = SessionState.FAILED
            self._emit_log(f"Mission '{config.mission_id}' failed to start: {e}", level="ERROR", category="CONFIG")
            self.event_manager.drain()
            raise

        self.zones.seal()
        self.session_state = SessionState.RUNNING
        self.event_manager.publish(
            MissionStarted(mission_time=0.0, mission_id=config.mission_id, start_view=start_view),
            source="MissionSession",
        )
        self._emit_log(f"Mission '{config.mission_id}' started")

        if config.timer is not None:
            multiplier = self.difficulty_multiplier if config.timer.scale_with_difficulty else 1.0
            self.timer.start(config.timer.base_duration, multiplier)

        if self.transporter is not None and flight_plan is not None:
            exit_point, pickup, drop = flight_plan
            self.transporter.exit = exit_point
            if config.transporter is not None and config.transporter.dispatch_on_start:
                self.transporter.dispatch(pickup, drop)

        if config.narrative:
            self.narrative.enqueue(config.narrative)
            if config.narrative_options.auto_advance:
                self.narrative.play_until_blocked()

        self._settle()

    def _resolve_flight_plan(self) -> Optional[tuple[Vector2, Vector2, Vector2]]:
        """Resolve (exit, pickup, drop) from the transporter labels."""
        spec = self.config.transporter
        if spec is None:
            return None
        exit_point = self.config.point(spec.exit)
        pickup = self.config.point(spec.pickup) if spec.pickup else exit_point
        drop = self.config.point(spec.place)
        return exit_point, pickup, drop

    def _check_points_on_map(self) -> None:
        """Reject a start view or flight plan label that lies off the map."""
        labels = [self.config.start_view]
        if self.config.transporter is not None:
            spec = self.config.transporter
            labels += [spec.place, spec.exit, spec.pickup]
        for label in labels:
            if label and not self.zones.is_valid_point(self.config.point(label)):
                raise InvalidGeometryError(label, f"point lies outside map {self.config.map_size}", kind="point")

    def _settle(self) -> None:
        """Drain the bus and evaluate the outcome until nothing is left to do.

        Re-entrant calls (a subscriber feeding the session another input)
        return immediately; the outer loop picks their events up in order.
        """
        if self._settling:
            return
        self._settling = True
        try:
            while True:
                self.event_manager.drain()
                if self.session_state == SessionState.RUNNING:
                    self.evaluator.evaluate()
                if not self.event_manager.has_queued_events():
                    break
        finally:
            self._settling = False

    def _evaluation_paused(self) -> bool:
        return self.config.narrative_options.pause_evaluation and self.narrative.is_blocked

    @property
    def is_running(self) -> bool:
        return self.session_state == SessionState.RUNNING

    @property
    def outcome(self) -> Optional[MissionOutcome]:
        return self.evaluator.outcome

    @property
    def result(self) -> MissionResult:
        if self.evaluator.outcome is None:
            return MissionResult.UNDECIDED
        return self.evaluator.outcome.result

    def subscribe(self, event_type: EventType, handler: Callable[[MissionEvent], None]) -> None:
        """Register a host handler for an output event type."""
        self.event_manager.subscribe(event_type, handler, subscriber_name=getattr(handler, "__name__", None))

    def summary(self) -> dict[str, Any]:
        """Plain summary for the campaign shell."""
        outcome = self.outcome
        return {
            "mission_id": self.config.mission_id,
            "state": self.session_state.name,
            "result": self.result.name,
            "mode": outcome.mode.name if outcome else None,
            "payload": outcome.payload if outcome else None,
            "reason": outcome.reason if outcome else None,
            "decided_at": outcome.decided_at if outcome else None,
            "mission_time": self.state.mission_time,
        }

    # Host input events

    def _accept_input(self, name: str) -> bool:
        if self.session_state == SessionState.RUNNING:
            return True
        self._emit_log(f"Ignored {name}: session is {self.session_state.name}", level="DEBUG")
        self._settle()
        return False

    def _push(self, event: MissionEvent) -> bool:
        self.event_manager.publish(event, source="host")
        self._settle()
        return True

    def advance_time(self, delta: float) -> bool:
        """Advance the mission clock by the elapsed seconds of one host tick."""
        if not self._accept_input("time delta"):
            return False
        self.state.advance_clock(delta)
        self.timer.tick(delta)
        return self._push(TimeElapsed(mission_time=self.state.mission_time, delta=delta))

    def unit_spawned(self, unit_id: str, faction: Faction) -> bool:
        if not self._accept_input("unit spawn"):
            return False
        return self._push(UnitSpawned(mission_time=self.state.mission_time, unit_id=unit_id, faction=faction))

    def unit_destroyed(self, unit_id: str, faction: Faction) -> bool:
        if not self._accept_input("unit destruction"):
            return False
        return self._push(UnitDestroyed(mission_time=self.state.mission_time, unit_id=unit_id, faction=faction))

    def unit_entered_zone(self, zone_id: str, unit_id: str, faction: Faction) -> bool:
        if not self._accept_input("zone entry"):
            return False
        return self._push(UnitEnteredZone(
            mission_time=self.state.mission_time, zone_id=zone_id, unit_id=unit_id, faction=faction,
        ))

    def unit_left_zone(self, zone_id: str, unit_id: str, faction: Faction) -> bool:
        if not self._accept_input("zone exit"):
            return False
        return self._push(UnitLeftZone(
            mission_time=self.state.mission_time, zone_id=zone_id, unit_id=unit_id, faction=faction,
        ))

    def transporter_arrived(self, position: Vector2) -> bool:
        if not self._accept_input("transporter arrival"):
            return False
        return self._push(TransporterArrived(mission_time=self.state.mission_time, position=position))

    def cue_playback_complete(self, cue_id: str) -> bool:
        if not self._accept_input("cue completion"):
            return False
        return self._push(CuePlaybackComplete(mission_time=self.state.mission_time, cue_id=cue_id))

    def abort(self, reason: str = "player_abort") -> bool:
        """Abandon the mission: skip narrative, force defeat, stop the timer."""
        if not self._accept_input("abort"):
            return False
        return self._push(PlayerAborted(mission_time=self.state.mission_time, reason=reason))

    # Host requests

    def _request(self, name: str, action: Callable[[], Any]) -> bool:
        """Run a state-changing request; illegal requests are logged no-ops."""
        if not self._accept_input(name):
            return False
        try:
            action()
        except (MissionStateError, MissionConfigError) as e:
            self._emit_log(f"Rejected {name}: {e}", level="WARNING", category="WARNING")
            self._settle()
            return False
        self._settle()
        return True

    def dispatch_transporter(self, pickup: Optional[Vector2] = None, drop: Optional[Vector2] = None) -> bool:
        """Dispatch the transporter (defaults to the configured flight plan)."""
        def action() -> None:
            if self.transporter is None:
                raise SessionStateError("Mission has no transporter")
            plan = self._resolve_flight_plan()
            if plan is None:
                raise SessionStateError("Mission has no transporter flight plan")
            _, default_pickup, default_drop = plan
            self.transporter.dispatch(pickup or default_pickup, drop or default_drop)
        return self._request("transporter dispatch", action)

    def recall_transporter(self, exit_point: Optional[Vector2] = None) -> bool:
        def action() -> None:
            if self.transporter is None:
                raise SessionStateError("Mission has no transporter")
            self.transporter.recall(exit_point)
        return self._request("transporter recall", action)

    def release_cargo(self) -> bool:
        def action() -> None:
            if self.transporter is None:
                raise SessionStateError("Mission has no transporter")
            self.transporter.release_cargo()
        return self._request("cargo release", action)

    def advance_narrative(self) -> bool:
        return self._request("narrative advance", self.narrative.advance)

    def lift_restriction(self, zone_id: str) -> bool:
        return self._request("restriction lift", lambda: self.zones.lift_restriction(zone_id))

    def restart_timer(self, base_duration: float) -> bool:
        """Restart the countdown with the session's difficulty multiplier."""
        scale = self.config.timer is None or self.config.timer.scale_with_difficulty
        multiplier = self.difficulty_multiplier if scale else 1.0
        return self._request("timer restart", lambda: self.timer.start(base_duration, multiplier))

    # Event handlers

    def _on_unit_spawned(self, event: MissionEvent) -> None:
        if isinstance(event, UnitSpawned) and not self.state.add_unit(event.unit_id, event.faction):
            self._emit_log(f"Duplicate spawn report for unit '{event.unit_id}'", level="WARNING", category="WARNING")

    def _on_unit_destroyed(self, event: MissionEvent) -> None:
        if isinstance(event, UnitDestroyed) and not self.state.remove_unit(event.unit_id, event.faction):
            self._emit_log(f"Duplicate destruction report for unit '{event.unit_id}'", level="DEBUG")

    def _on_player_aborted(self, event: MissionEvent) -> None:
        if not isinstance(event, PlayerAborted) or self.session_state != SessionState.RUNNING:
            return
        self._emit_log(f"Mission aborted ({event.reason})", level="WARNING")
        self.narrative.skip_all()
        if self.transporter is not None:
            self.transporter.force_abort()
        self.evaluator.force_defeat(event.reason)
        self.timer.cancel()

    def _on_mission_concluded(self, event: MissionEvent) -> None:
        if not isinstance(event, MissionConcluded):
            return
        self.session_state = SessionState.CONCLUDED
        self.timer.cancel()
        self._emit_log(
            f"Mission '{self.config.mission_id}' concluded: {event.outcome.result.name}"
            + (f" -> {event.outcome.payload}" if event.outcome.payload else "")
        )
