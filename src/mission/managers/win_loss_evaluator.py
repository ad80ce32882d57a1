"""Win/loss evaluator: the authoritative arbiter of the mission outcome.

This module provides the evaluator that routes mission events to the
conditions of the configured policy and decides the outcome.

Design Principles:
- Event routing based on condition interests (only relevant events delivered)
- Evaluation at settle points: the session drains every event caused by one
  host input before calling evaluate(), so collisions within that input are
  judged together
- Defeat conditions are checked before victory conditions
- The outcome is written once; after that every event and evaluation is a no-op
"""

from collections import defaultdict
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from ...core.data import EvaluationMode, MissionResult
from ...core.errors import InvalidPolicyError, SessionStateError
from ...core.events import (
    ConditionContext,
    EventPriority,
    EventType,
    LogMessage,
    MissionConcluded,
    MissionEvent,
)
from ..conditions.conditions import Condition
from ..conditions.outcome import MissionOutcome
from ..conditions.policies import PredicateRegistry, WinLossPolicy, build_policy

if TYPE_CHECKING:
    from ...core.events import EventManager
    from ...core.mission_state import MissionState
    from ...core.mission_view import MissionView
    from ..config.mission_config import PolicySpec


class WinLossEvaluator:
    """Routes events to policy conditions and settles the mission outcome.

    This evaluator:
    1. Builds and validates the policy at configure() time
    2. Routes events only to subscribed conditions
    3. Decides the outcome at evaluate(), defeat before victory
    4. Publishes MissionConcluded exactly once
    """

    def __init__(
        self,
        event_manager: "EventManager",
        state: "MissionState",
        view: "MissionView",
        predicates: Optional[PredicateRegistry] = None,
    ):
        """Initialize the evaluator.

        Args:
            event_manager: Event manager for subscriptions and publishing
            state: Mission state (for the mission clock)
            view: Read-only view handed to conditions
            predicates: External predicates for Custom policies
        """
        self.event_manager = event_manager
        self.state = state
        self.view = view
        self.predicates = predicates or PredicateRegistry()

        self.policy: Optional[WinLossPolicy] = None
        self.outcome: Optional[MissionOutcome] = None

        # Returns True while evaluation should be deferred (e.g. blocking cue playing)
        self.pause_check: Callable[[], bool] = lambda: False

        self._event_subscribers: dict[EventType, list[Condition]] = defaultdict(list)
        self._subscribed_types: set[EventType] = set()

    def _emit_log(self, message: str, level: str = "DEBUG") -> None:
        """Emit a log message event."""
        self.event_manager.publish(
            LogMessage(
                mission_time=self.state.mission_time,
                message=message,
                category="OUTCOME",
                level=level,
                source="WinLossEvaluator",
            ),
            priority=EventPriority.LOW,
            source="WinLossEvaluator",
        )

    def configure(
        self,
        spec: "PolicySpec",
        zone_ids: Iterable[str] = (),
        has_transporter: bool = False,
        has_timer: bool = False,
    ) -> WinLossPolicy:
        """Build the policy and subscribe its conditions.

        Raises:
            InvalidPolicyError: If the policy is malformed; nothing is subscribed
            SessionStateError: If a policy is already configured
        """
        if self.policy is not None:
            raise SessionStateError("Win/loss policy is already configured")

        try:
            policy = build_policy(spec, zone_ids, self.predicates, has_transporter, has_timer)
        except InvalidPolicyError as e:
            self._emit_log(f"Policy rejected: {e}", level="ERROR")
            raise

        self.policy = policy
        self.outcome = MissionOutcome(mode=policy.mode)

        for condition in policy.all_conditions():
            for event_type in condition.interests:
                self._event_subscribers[event_type].append(condition)

        for event_type in self._event_subscribers:
            if event_type in self._subscribed_types:
                continue
            self._subscribed_types.add(event_type)
            self.event_manager.subscribe(
                event_type=event_type,
                subscriber=self._on_event,
                subscriber_name=f"WinLossEvaluator.{event_type.name.lower()}",
            )

        for condition in policy.all_conditions():
            condition.recompute(self.view)

        self._emit_log(
            f"Configured {policy.mode.name} policy: "
            f"{len(policy.victory_conditions)} victory / {len(policy.defeat_conditions)} defeat condition(s)",
            level="INFO",
        )
        return policy

    @property
    def is_concluded(self) -> bool:
        return self.outcome is not None and self.outcome.is_decided

    @property
    def is_paused(self) -> bool:
        return self.pause_check()

    def _on_event(self, event: MissionEvent) -> None:
        """Route an event to interested conditions (ignored after conclusion)."""
        if self.is_concluded:
            return

        interested = self._event_subscribers.get(event.event_type, [])
        if not interested:
            return

        context = ConditionContext(event=event, view=self.view)
        for condition in interested:
            if condition.is_satisfied:
                continue
            condition.on_event(context)
            if condition.is_satisfied:
                self._emit_log(f"Condition met: {condition.description}", level="INFO")

    def evaluate(self) -> Optional[MissionOutcome]:
        """Check the policy and settle the outcome if a terminal condition holds.

        Returns:
            The outcome if this call concluded the mission, otherwise None
        """
        if self.policy is None or self.outcome is None or self.is_concluded:
            return None
        if self.is_paused:
            return None

        self.policy.refresh_verdicts(self.view)
        for condition in self.policy.all_conditions():
            if not condition.is_satisfied:
                condition.poll(self.view)

        defeat = self.policy.satisfied_defeat()
        if defeat is not None:
            return self._conclude(MissionResult.DEFEAT, defeat.description)

        victory = self.policy.satisfied_victory()
        if victory is not None:
            return self._conclude(MissionResult.VICTORY, victory.description, self.policy.payload)

        return None

    def force_defeat(self, reason: str) -> Optional[MissionOutcome]:
        """Conclude with defeat regardless of conditions or pause (mission abort).

        Returns:
            The outcome if this call concluded the mission, otherwise None
        """
        if self.outcome is None:
            # Abort before configure: record the defeat against the default mode
            self.outcome = MissionOutcome(mode=EvaluationMode.STANDARD)
        return self._conclude(MissionResult.DEFEAT, reason)

    def _conclude(
        self,
        result: MissionResult,
        reason: str,
        payload: Optional[str] = None,
    ) -> Optional[MissionOutcome]:
        if self.outcome is None:
            raise SessionStateError("Cannot conclude a mission whose policy is not configured")
        if not self.outcome.settle(result, reason, self.state.mission_time, payload):
            return None

        self.event_manager.publish(
            MissionConcluded(mission_time=self.state.mission_time, outcome=self.outcome),
            priority=EventPriority.HIGH,
            source="WinLossEvaluator",
        )
        self._emit_log(f"Mission concluded: {result.name} ({reason})", level="INFO")
        return self.outcome

    def get_event_stats(self) -> dict[str, int]:
        """Get statistics about event subscriptions (for debugging)."""
        return {event_type.name: len(conditions)
                for event_type, conditions in self._event_subscribers.items()}
