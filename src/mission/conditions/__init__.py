"""Win/loss conditions, policies and the mission outcome."""

from .outcome import MissionOutcome
from .conditions import (
    Condition,
    FactionEliminatedCondition,
    MissionPredicate,
    PredicateCondition,
    PredicateVerdict,
    TimerExpiredCondition,
    TransporterDepartedCondition,
    UnitDestroyedCondition,
    ZoneCapturedCondition,
)
from .policies import PredicateRegistry, WinLossPolicy, build_policy

__all__ = [
    "MissionOutcome",
    "Condition",
    "FactionEliminatedCondition",
    "MissionPredicate",
    "PredicateCondition",
    "PredicateVerdict",
    "TimerExpiredCondition",
    "TransporterDepartedCondition",
    "UnitDestroyedCondition",
    "ZoneCapturedCondition",
    "PredicateRegistry",
    "WinLossPolicy",
    "build_policy",
]
