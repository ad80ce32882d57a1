"""Mission countdown timer.

One countdown per mission. The effective duration is the base duration scaled
by an opaque difficulty multiplier supplied by the campaign shell.
"""

import math
from typing import TYPE_CHECKING

from ...core.errors import AlreadyExpiredError
from ...core.events import (
    EventPriority,
    LogMessage,
    TimerCancelled,
    TimerExpired,
    TimerStarted,
)

if TYPE_CHECKING:
    from ...core.events import EventManager
    from ...core.mission_state import MissionState


def scale_duration(base_duration: float, multiplier: float) -> int:
    """Effective duration in whole seconds, rounded half up."""
    return int(math.floor(base_duration * multiplier + 0.5))


class MissionTimer:
    """Countdown that fires TimerExpired exactly once."""

    def __init__(self, event_manager: "EventManager", state: "MissionState"):
        self.event_manager = event_manager
        self.state = state

        self.base_duration: float = 0
        self.multiplier: float = 1.0
        self.duration: int = 0
        self.remaining: float = 0
        self.running = False
        self.expired = False
        self.has_started = False

    def _emit_log(self, message: str, level: str = "DEBUG") -> None:
        """Emit a log message event."""
        self.event_manager.publish(
            LogMessage(
                mission_time=self.state.mission_time,
                message=message,
                category="TIMER",
                level=level,
                source="MissionTimer",
            ),
            priority=EventPriority.LOW,
            source="MissionTimer",
        )

    def start(self, base_duration: float, difficulty_multiplier: float = 1.0) -> int:
        """Start (or restart) the countdown.

        Args:
            base_duration: Base duration in seconds
            difficulty_multiplier: Scalar resolved by the campaign shell

        Returns:
            Effective duration in seconds

        Raises:
            AlreadyExpiredError: If the timer already fired
            ValueError: If the duration or multiplier is not positive
        """
        if self.expired:
            raise AlreadyExpiredError()
        if base_duration <= 0:
            raise ValueError(f"Timer base duration must be positive, got {base_duration}")
        if difficulty_multiplier <= 0:
            raise ValueError(f"Difficulty multiplier must be positive, got {difficulty_multiplier}")

        self.base_duration = base_duration
        self.multiplier = difficulty_multiplier
        self.duration = max(1, scale_duration(base_duration, difficulty_multiplier))
        self.remaining = self.duration
        self.running = True
        self.has_started = True

        self.event_manager.publish(
            TimerStarted(mission_time=self.state.mission_time, duration=self.duration),
            source="MissionTimer",
        )
        self._emit_log(
            f"Mission timer started: {self.duration}s ({base_duration}s x {difficulty_multiplier})",
            level="INFO",
        )
        return self.duration

    def tick(self, elapsed: float) -> bool:
        """Count down by the elapsed seconds.

        Returns:
            True if this tick made the timer expire
        """
        if elapsed < 0:
            raise ValueError(f"Elapsed time must be non-negative, got {elapsed}")
        if not self.running:
            return False

        self.remaining = max(0.0, self.remaining - elapsed)
        if self.remaining > 0:
            return False

        self.running = False
        self.expired = True
        self.event_manager.publish(
            TimerExpired(mission_time=self.state.mission_time, duration=self.duration),
            source="MissionTimer",
        )
        self._emit_log("Mission timer expired", level="INFO")
        return True

    def cancel(self) -> bool:
        """Stop the countdown without firing.

        Returns:
            True if a running countdown was stopped
        """
        if not self.running:
            return False
        self.running = False
        self.event_manager.publish(
            TimerCancelled(mission_time=self.state.mission_time, remaining=self.remaining),
            source="MissionTimer",
        )
        self._emit_log(f"Mission timer cancelled with {self.remaining:.0f}s left")
        return True

    @property
    def elapsed(self) -> float:
        """Seconds counted down so far."""
        return self.duration - self.remaining
