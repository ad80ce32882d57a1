"""Narrative sequencer for ordered mission cues.

Cues are played strictly in the order they were enqueued and each cue plays
at most once. A blocking cue holds the queue until the host reports that its
playback completed; non-blocking cues fire and the queue carries on. Blocking
is cooperative: nothing here waits, the sequencer only refuses to move on.
"""

from collections import deque
from typing import TYPE_CHECKING, Optional, Sequence

from ...core.errors import CueBlockedError, CueReplayError, NarrativeExhaustedError
from ...core.events import (
    CuePlaybackComplete,
    CueRequested,
    EventPriority,
    EventType,
    LogMessage,
    MissionEvent,
    NarrativeSkipped,
)

if TYPE_CHECKING:
    from ...core.events import EventManager
    from ...core.mission_state import MissionState
    from ..config.mission_config import NarrativeCue


class NarrativeSequencer:
    """Plays narrative cues in order, honouring blocking cues."""

    def __init__(
        self,
        event_manager: "EventManager",
        state: "MissionState",
        auto_advance: bool = True,
    ):
        """Initialize the sequencer.

        Args:
            event_manager: Event manager for cue requests and logs
            state: Mission state (for the mission clock)
            auto_advance: Keep playing queued cues until a blocking cue is pending
        """
        self.event_manager = event_manager
        self.state = state
        self.auto_advance = auto_advance

        self._queue: deque["NarrativeCue"] = deque()
        self._pending: Optional["NarrativeCue"] = None
        self._awaiting_report: list["NarrativeCue"] = []  # Non-blocking cues the host may still report
        self.played: list["NarrativeCue"] = []
        self.skipped: list["NarrativeCue"] = []

        self.event_manager.subscribe(
            EventType.CUE_PLAYBACK_COMPLETE,
            self._on_playback_complete,
            subscriber_name="NarrativeSequencer.cue_playback_complete",
        )

    def _emit_log(self, message: str, level: str = "DEBUG") -> None:
        """Emit a log message event."""
        self.event_manager.publish(
            LogMessage(
                mission_time=self.state.mission_time,
                message=message,
                category="NARRATIVE",
                level=level,
                source="NarrativeSequencer",
            ),
            priority=EventPriority.LOW,
            source="NarrativeSequencer",
        )

    def enqueue(self, cues: Sequence["NarrativeCue"]) -> None:
        """Append cues to the end of the queue.

        Raises:
            ValueError: If no cues are given
        """
        if not cues:
            raise ValueError("Narrative cue sequence must contain at least one cue")
        self._queue.extend(cues)
        self._emit_log(f"Enqueued {len(cues)} cue(s): {', '.join(c.cue_id for c in cues)}")

    def advance(self) -> "NarrativeCue":
        """Request playback of the next unplayed cue.

        Returns:
            The cue that was requested

        Raises:
            CueBlockedError: If a blocking cue has not completed yet
            NarrativeExhaustedError: If every cue has been played or skipped
        """
        if self._pending is not None:
            raise CueBlockedError(self._pending.cue_id)
        if not self._queue:
            raise NarrativeExhaustedError()

        cue = self._queue.popleft()
        self.played.append(cue)
        if cue.blocking:
            self._pending = cue
        else:
            self._awaiting_report.append(cue)

        self.event_manager.publish(
            CueRequested(
                mission_time=self.state.mission_time,
                cue_id=cue.cue_id,
                kind=cue.kind,
                blocking=cue.blocking,
            ),
            source="NarrativeSequencer",
        )
        self._emit_log(f"Playing {cue.kind.name.lower()} cue '{cue.cue_id}'", level="INFO")
        return cue

    def play_until_blocked(self) -> list["NarrativeCue"]:
        """Advance through queued cues until one blocks or the queue empties."""
        requested = []
        while self._queue and self._pending is None:
            requested.append(self.advance())
        return requested

    def complete(self, cue_id: str) -> "NarrativeCue":
        """Record that the host finished playing a cue.

        Raises:
            CueReplayError: If the cue is not playing or was already reported
        """
        if self._pending is not None and self._pending.cue_id == cue_id:
            cue = self._pending
            self._pending = None
            self._emit_log(f"Cue '{cue_id}' completed")
            return cue

        for cue in self._awaiting_report:
            if cue.cue_id == cue_id:
                self._awaiting_report.remove(cue)
                return cue

        raise CueReplayError(cue_id)

    def skip_all(self) -> list[str]:
        """Discard the pending and remaining cues (mission abort).

        Returns:
            Ids of the cues that will never be played to completion
        """
        skipped = []
        if self._pending is not None:
            skipped.append(self._pending)
            self._pending = None
        skipped.extend(self._queue)
        self._queue.clear()
        self._awaiting_report.clear()
        self.skipped.extend(skipped)

        skipped_ids = [cue.cue_id for cue in skipped]
        if skipped_ids:
            self.event_manager.publish(
                NarrativeSkipped(
                    mission_time=self.state.mission_time,
                    skipped_cue_ids=tuple(skipped_ids),
                ),
                source="NarrativeSequencer",
            )
            self._emit_log(f"Skipped cue(s): {', '.join(skipped_ids)}", level="INFO")
        return skipped_ids

    @property
    def is_blocked(self) -> bool:
        """True while a blocking cue is awaiting its completion report."""
        return self._pending is not None

    @property
    def pending_cue(self) -> Optional["NarrativeCue"]:
        return self._pending

    @property
    def remaining(self) -> list["NarrativeCue"]:
        return list(self._queue)

    @property
    def is_finished(self) -> bool:
        return not self._queue and self._pending is None

    def _on_playback_complete(self, event: MissionEvent) -> None:
        if not isinstance(event, CuePlaybackComplete):
            return
        try:
            self.complete(event.cue_id)
        except CueReplayError as e:
            self._emit_log(f"Completion rejected: {e}", level="WARNING")
            return
        if self.auto_advance:
            self.play_until_blocked()
