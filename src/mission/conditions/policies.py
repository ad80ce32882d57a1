"""Win/loss policies built from policy descriptors.

A policy is a pair of condition sets plus the rule that combines them:
- PreOffworld: victory when the transporter departs; defeat on timer expiry
  or once the player has lost every unit it fielded.
- Standard: configured victory/defeat conditions; victory needs all (or any)
  victory conditions, defeat needs any defeat condition.
- Custom: a named external predicate decides, alongside optional defeat conditions.

Every reference (zones, predicates, transporter) is validated when the policy
is built, so a bad policy fails before the mission starts.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from ...core.data import EvaluationMode, Faction, MissionResult, parse_faction
from ...core.errors import InvalidPolicyError
from ...core.mission_view import MissionView
from ..config.mission_config import ConditionSpec, PolicySpec
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

VICTORY_MODES = ("all", "any")


class PredicateRegistry:
    """Named external predicates available to Custom policies."""

    def __init__(self):
        self._predicates: dict[str, MissionPredicate] = {}

    def register(self, predicate_id: str, predicate: MissionPredicate) -> None:
        if predicate_id in self._predicates:
            raise ValueError(f"Predicate '{predicate_id}' is already registered")
        self._predicates[predicate_id] = predicate

    def predicate(self, predicate_id: str) -> Callable[[MissionPredicate], MissionPredicate]:
        """Decorator form of register()."""
        def decorator(fn: MissionPredicate) -> MissionPredicate:
            self.register(predicate_id, fn)
            return fn
        return decorator

    def get(self, predicate_id: str) -> Optional[MissionPredicate]:
        return self._predicates.get(predicate_id)

    def __contains__(self, predicate_id: object) -> bool:
        return predicate_id in self._predicates

    def names(self) -> list[str]:
        return sorted(self._predicates)


@dataclass
class WinLossPolicy:
    """Configured victory and defeat condition sets."""

    mode: EvaluationMode
    victory_conditions: list[Condition] = field(default_factory=list)
    defeat_conditions: list[Condition] = field(default_factory=list)
    victory_mode: str = "all"
    payload: Optional[str] = None
    verdicts: list[PredicateVerdict] = field(default_factory=list)

    def refresh_verdicts(self, view: MissionView) -> None:
        """Ask each external predicate once for the current evaluation point."""
        for verdict in self.verdicts:
            verdict.refresh(view)

    def all_conditions(self) -> list[Condition]:
        return self.defeat_conditions + self.victory_conditions

    def satisfied_defeat(self) -> Optional[Condition]:
        """First satisfied defeat condition, in configured order."""
        for condition in self.defeat_conditions:
            if condition.is_satisfied:
                return condition
        return None

    def satisfied_victory(self) -> Optional[Condition]:
        """The condition that completes victory, or None.

        In 'all' mode this is the last victory condition once every one is
        satisfied; in 'any' mode the first satisfied one.
        """
        if not self.victory_conditions:
            return None
        if self.victory_mode == "any":
            for condition in self.victory_conditions:
                if condition.is_satisfied:
                    return condition
            return None
        if all(condition.is_satisfied for condition in self.victory_conditions):
            return self.victory_conditions[-1]
        return None


def build_policy(
    spec: PolicySpec,
    zone_ids: Iterable[str],
    predicates: Optional[PredicateRegistry] = None,
    has_transporter: bool = False,
    has_timer: bool = False,
) -> WinLossPolicy:
    """Build a policy from its descriptor.

    Args:
        spec: Policy descriptor
        zone_ids: Zones registered for the mission
        predicates: Registry of external predicates for Custom policies
        has_transporter: Whether the mission has a transporter
        has_timer: Whether the mission has a countdown

    Raises:
        InvalidPolicyError: If the policy is malformed or references something unknown
    """
    zones = set(zone_ids)
    mode_name = spec.mode.name.lower()

    if spec.victory_mode not in VICTORY_MODES:
        raise InvalidPolicyError(f"victory_mode must be one of {VICTORY_MODES}", mode_name)

    defeat = [_build_condition(c, zones, has_transporter, has_timer, mode_name) for c in spec.defeat]

    if spec.mode == EvaluationMode.PRE_OFFWORLD:
        if not spec.target_level:
            raise InvalidPolicyError("a target level is required", mode_name)
        if not has_transporter:
            raise InvalidPolicyError("the mission has no transporter to evacuate", mode_name)
        standard_defeat: list[Condition] = [FactionEliminatedCondition(Faction.PLAYER, "All player units lost")]
        if has_timer:
            standard_defeat.append(TimerExpiredCondition())
        return WinLossPolicy(
            mode=spec.mode,
            victory_conditions=[TransporterDepartedCondition()],
            defeat_conditions=standard_defeat + defeat,
            victory_mode="any",
            payload=spec.target_level,
        )

    if spec.mode == EvaluationMode.CUSTOM:
        if not spec.predicate_id:
            raise InvalidPolicyError("a predicate id is required", mode_name)
        predicate = predicates.get(spec.predicate_id) if predicates is not None else None
        if predicate is None:
            raise InvalidPolicyError(f"unknown predicate '{spec.predicate_id}'", mode_name)
        verdict = PredicateVerdict(spec.predicate_id, predicate)
        return WinLossPolicy(
            mode=spec.mode,
            victory_conditions=[PredicateCondition(verdict, MissionResult.VICTORY)],
            defeat_conditions=[PredicateCondition(verdict, MissionResult.DEFEAT)] + defeat,
            victory_mode="any",
            payload=spec.target_level,
            verdicts=[verdict],
        )

    victory = [_build_condition(c, zones, has_transporter, has_timer, mode_name) for c in spec.victory]
    if not victory and not defeat:
        raise InvalidPolicyError("at least one victory or defeat condition is required", mode_name)
    return WinLossPolicy(
        mode=spec.mode,
        victory_conditions=victory,
        defeat_conditions=defeat,
        victory_mode=spec.victory_mode,
        payload=spec.target_level,
    )


def _build_condition(
    spec: ConditionSpec,
    zones: set[str],
    has_transporter: bool,
    has_timer: bool,
    mode_name: str,
) -> Condition:
    params = spec.params
    description = params.get("description")

    try:
        if spec.kind in ("all_units_lost", "faction_eliminated"):
            faction = parse_faction(params.get("faction", Faction.PLAYER))
            return FactionEliminatedCondition(faction, description)

        if spec.kind == "unit_destroyed":
            if "unit" not in params:
                raise InvalidPolicyError("unit_destroyed needs a 'unit'", mode_name)
            return UnitDestroyedCondition(str(params["unit"]), description)

        if spec.kind == "zone_captured":
            zone_id = params.get("zone")
            if zone_id not in zones:
                raise InvalidPolicyError(f"unknown zone '{zone_id}'", mode_name)
            faction = parse_faction(params.get("faction", Faction.PLAYER))
            return ZoneCapturedCondition(zone_id, faction, description)
    except ValueError as e:
        if isinstance(e, InvalidPolicyError):
            raise
        raise InvalidPolicyError(str(e), mode_name) from e

    if spec.kind in ("timer_expired", "survive_timer"):
        if not has_timer:
            raise InvalidPolicyError(f"'{spec.kind}' needs a mission timer", mode_name)
        return TimerExpiredCondition(description or "Mission timer expired")

    if spec.kind == "transporter_departed":
        if not has_transporter:
            raise InvalidPolicyError("the mission has no transporter", mode_name)
        return TransporterDepartedCondition(description or "Evacuate the transporter")

    raise InvalidPolicyError(f"unknown condition type '{spec.kind}'", mode_name)
