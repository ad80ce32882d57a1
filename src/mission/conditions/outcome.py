"""Mission outcome with write-once semantics."""

from dataclasses import dataclass
from typing import Optional

from ...core.data import EvaluationMode, MissionResult


@dataclass
class MissionOutcome:
    """Result of a mission session.

    Starts UNDECIDED. The first call to settle() with VICTORY or DEFEAT wins;
    every later call is refused.
    """
    mode: EvaluationMode
    result: MissionResult = MissionResult.UNDECIDED
    payload: Optional[str] = None
    reason: Optional[str] = None
    decided_at: Optional[float] = None

    @property
    def is_decided(self) -> bool:
        return self.result != MissionResult.UNDECIDED

    @property
    def is_victory(self) -> bool:
        return self.result == MissionResult.VICTORY

    @property
    def is_defeat(self) -> bool:
        return self.result == MissionResult.DEFEAT

    def settle(
        self,
        result: MissionResult,
        reason: str,
        mission_time: float,
        payload: Optional[str] = None,
    ) -> bool:
        """Decide the outcome if it is still undecided.

        Returns:
            True if this call decided the outcome
        """
        if result == MissionResult.UNDECIDED:
            raise ValueError("Cannot settle an outcome as UNDECIDED")
        if self.is_decided:
            return False
        self.result = result
        self.reason = reason
        self.decided_at = mission_time
        self.payload = payload
        return True
