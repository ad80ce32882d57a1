"""Data structures for mission configuration.

A MissionConfig is the immutable, declarative description of one mission:
named points, zones, the countdown, the narrative cue list, the transporter
flight plan and the win/loss policy. It is built once (usually by
MissionConfigLoader) and handed to a MissionSession.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from ...core.data import CueKind, EvaluationMode, Faction, Rect, Vector2
from ...core.errors import UnknownPointError


@dataclass(frozen=True)
class NarrativeCue:
    """A video or message presentation tied to mission progress."""
    cue_id: str
    kind: CueKind = CueKind.BRIEFING
    blocking: bool = True


@dataclass(frozen=True)
class ZoneSpec:
    """A zone to register at mission start."""
    zone_id: str
    rect: Rect
    restricted_faction: Optional[Faction] = None
    dynamic: bool = False


@dataclass(frozen=True)
class TimerSpec:
    """Mission countdown settings."""
    base_duration: float
    scale_with_difficulty: bool = True


@dataclass(frozen=True)
class TransporterSpec:
    """Transporter flight plan, as label names resolved against the config points."""
    place: str
    exit: str
    pickup: Optional[str] = None  # Defaults to the exit (the transporter flies in the way it leaves)
    transporter_id: str = "transporter"
    dispatch_on_start: bool = True
    hold_cargo: bool = False


@dataclass(frozen=True)
class ConditionSpec:
    """One win/loss condition of a policy."""
    kind: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PolicySpec:
    """Win/loss policy descriptor: mode tag plus its parameters."""
    mode: EvaluationMode
    target_level: Optional[str] = None
    victory: tuple[ConditionSpec, ...] = ()
    defeat: tuple[ConditionSpec, ...] = ()
    victory_mode: str = "all"
    predicate_id: Optional[str] = None

    @classmethod
    def pre_offworld(
        cls,
        target_level: str,
        defeat: tuple[ConditionSpec, ...] = (),
    ) -> "PolicySpec":
        """Victory when the transporter departs; campaign moves to target_level.

        Extra defeat conditions are checked alongside the standard ones.
        """
        return cls(mode=EvaluationMode.PRE_OFFWORLD, target_level=target_level, defeat=tuple(defeat))

    @classmethod
    def standard(
        cls,
        victory: tuple[ConditionSpec, ...] = (),
        defeat: tuple[ConditionSpec, ...] = (),
        victory_mode: str = "all",
        next_level: Optional[str] = None,
    ) -> "PolicySpec":
        return cls(
            mode=EvaluationMode.STANDARD,
            target_level=next_level,
            victory=tuple(victory),
            defeat=tuple(defeat),
            victory_mode=victory_mode,
        )

    @classmethod
    def custom(
        cls,
        predicate_id: str,
        defeat: tuple[ConditionSpec, ...] = (),
        next_level: Optional[str] = None,
    ) -> "PolicySpec":
        return cls(
            mode=EvaluationMode.CUSTOM,
            predicate_id=predicate_id,
            target_level=next_level,
            defeat=tuple(defeat),
            victory_mode="any",
        )


@dataclass(frozen=True)
class NarrativeOptions:
    """How the narrative interacts with the rest of the mission."""
    auto_advance: bool = True
    pause_evaluation: bool = False  # Defer win/loss evaluation while a blocking cue plays


@dataclass(frozen=True)
class MissionConfig:
    """Immutable per-mission configuration."""
    mission_id: str
    policy: PolicySpec
    name: str = ""
    points: dict[str, Vector2] = field(default_factory=dict)
    zones: tuple[ZoneSpec, ...] = ()
    timer: Optional[TimerSpec] = None
    narrative: tuple[NarrativeCue, ...] = ()
    narrative_options: NarrativeOptions = field(default_factory=NarrativeOptions)
    transporter: Optional[TransporterSpec] = None
    start_view: Optional[str] = None
    units: dict[str, Faction] = field(default_factory=dict)
    map_size: Optional[tuple[int, int]] = None  # (width, height)

    def point(self, label: str) -> Vector2:
        """Resolve a named point.

        Raises:
            UnknownPointError: If the label is not defined
        """
        try:
            return self.points[label]
        except KeyError:
            raise UnknownPointError(label) from None
