"""Loading of mission configurations from YAML files.

Mission files are the data form of the campaign level scripts: labelled
coordinates, no-go areas, a countdown, the narrative cue list, the transporter
flight plan and the win/loss policy.
"""

from pathlib import Path
from typing import Any, Optional

import yaml

from ...core.data import CueKind, EvaluationMode, Rect, Vector2, parse_faction
from ...core.errors import InvalidGeometryError, MissionConfigError, UnknownPointError
from .difficulty import hours_to_seconds, minutes_to_seconds
from .mission_config import (
    ConditionSpec,
    MissionConfig,
    NarrativeCue,
    NarrativeOptions,
    PolicySpec,
    TimerSpec,
    TransporterSpec,
    ZoneSpec,
)

CUE_KIND_ALIASES = {
    "CAMP_MSG": CueKind.BRIEFING,
    "BRIEFING": CueKind.BRIEFING,
    "MISS_MSG": CueKind.IN_MISSION,
    "IN_MISSION": CueKind.IN_MISSION,
}

POLICY_MODE_ALIASES = {
    "PRE_OFFWORLD": EvaluationMode.PRE_OFFWORLD,
    "CAM_VICTORY_PRE_OFFWORLD": EvaluationMode.PRE_OFFWORLD,
    "STANDARD": EvaluationMode.STANDARD,
    "CAM_VICTORY_STANDARD": EvaluationMode.STANDARD,
    "CUSTOM": EvaluationMode.CUSTOM,
}


class MissionConfigLoader:
    """Handles loading mission configurations from YAML files."""

    @staticmethod
    def load_from_file(file_path: str) -> MissionConfig:
        """Load a mission configuration from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist
            MissionConfigError: If the file cannot be parsed or is malformed
        """
        path = Path(file_path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise FileNotFoundError(f"Mission file not found: {file_path}")
        except yaml.YAMLError as e:
            raise MissionConfigError(f"Failed to parse YAML mission {path.name}: {e}") from e

        if not isinstance(data, dict):
            raise MissionConfigError(f"Mission file {path.name} must contain a mapping")
        return MissionConfigLoader.from_dict(data, default_id=path.stem)

    @staticmethod
    def from_dict(data: dict[str, Any], default_id: Optional[str] = None) -> MissionConfig:
        """Build a MissionConfig from parsed YAML data."""
        mission_id = data.get("id", default_id)
        if not mission_id:
            raise MissionConfigError("Mission must have an 'id'")

        points, areas = MissionConfigLoader._parse_labels(data.get("labels", {}))

        map_size = None
        if "map_size" in data:
            size = data["map_size"]
            map_size = (int(size["width"]), int(size["height"]))

        zones = tuple(
            MissionConfigLoader._parse_zone(zone_id, zone_data, areas)
            for zone_id, zone_data in (data.get("zones") or {}).items()
        )

        timer = None
        if data.get("timer") is not None:
            timer = MissionConfigLoader._parse_timer(data["timer"])

        narrative = MissionConfigLoader._parse_narrative(data.get("narrative"))

        options_data = data.get("narrative_options") or {}
        narrative_options = NarrativeOptions(
            auto_advance=bool(options_data.get("auto_advance", True)),
            pause_evaluation=bool(options_data.get("pause_evaluation", False)),
        )

        transporter = None
        if data.get("transporter") is not None:
            transporter = MissionConfigLoader._parse_transporter(data["transporter"], points)

        start_view = data.get("start_view")
        if start_view is not None and start_view not in points:
            raise UnknownPointError(start_view)

        units = {
            str(unit_id): MissionConfigLoader._faction(faction, f"unit '{unit_id}'")
            for unit_id, faction in (data.get("units") or {}).items()
        }

        if "win_loss" not in data:
            raise MissionConfigError("Mission must define a 'win_loss' policy")
        policy = MissionConfigLoader._parse_policy(data["win_loss"])

        return MissionConfig(
            mission_id=str(mission_id),
            name=data.get("name", str(mission_id)),
            policy=policy,
            points=points,
            zones=zones,
            timer=timer,
            narrative=narrative,
            narrative_options=narrative_options,
            transporter=transporter,
            start_view=start_view,
            units=units,
            map_size=map_size,
        )

    @staticmethod
    def _parse_labels(labels: dict[str, Any]) -> tuple[dict[str, Vector2], dict[str, Rect]]:
        """Split labels into points ({x, y}) and areas ({x, y, x2, y2})."""
        points: dict[str, Vector2] = {}
        areas: dict[str, Rect] = {}
        for name, label in labels.items():
            try:
                if "x2" in label or "y2" in label:
                    areas[name] = Rect.from_corners(label["x"], label["y"], label["x2"], label["y2"])
                else:
                    points[name] = Vector2.from_xy(label["x"], label["y"])
            except (KeyError, TypeError) as e:
                raise MissionConfigError(f"Malformed label '{name}': {label!r}") from e
        return points, areas

    @staticmethod
    def _parse_zone(zone_id: str, zone_data: dict[str, Any], areas: dict[str, Rect]) -> ZoneSpec:
        if "area" in zone_data:
            area = zone_data["area"]
            if area not in areas:
                raise UnknownPointError(area)
            rect = areas[area]
        elif "rect" in zone_data:
            r = zone_data["rect"]
            try:
                rect = Rect.from_corners(r["x"], r["y"], r["x2"], r["y2"])
            except (KeyError, TypeError) as e:
                raise InvalidGeometryError(zone_id, f"malformed rect {r!r}") from e
        else:
            raise InvalidGeometryError(zone_id, "zone needs an 'area' label or a 'rect'")

        restricted = zone_data.get("no_go_for")
        return ZoneSpec(
            zone_id=zone_id,
            rect=rect,
            restricted_faction=(
                MissionConfigLoader._faction(restricted, f"zone '{zone_id}'")
                if restricted is not None else None
            ),
            dynamic=bool(zone_data.get("dynamic", False)),
        )

    @staticmethod
    def _parse_timer(timer_data: Any) -> TimerSpec:
        if isinstance(timer_data, (int, float)):
            if timer_data <= 0:
                raise MissionConfigError(f"Timer duration must be positive: {timer_data!r}")
            return TimerSpec(base_duration=float(timer_data))

        seconds = float(timer_data.get("seconds", 0))
        seconds += minutes_to_seconds(float(timer_data.get("minutes", 0)))
        seconds += hours_to_seconds(float(timer_data.get("hours", 0)))
        if seconds <= 0:
            raise MissionConfigError(f"Timer duration must be positive: {timer_data!r}")
        return TimerSpec(
            base_duration=seconds,
            scale_with_difficulty=bool(timer_data.get("scale_with_difficulty", True)),
        )

    @staticmethod
    def _parse_narrative(narrative_data: Any) -> tuple[NarrativeCue, ...]:
        """Parse a single cue mapping or a list of them into an ordered tuple."""
        if narrative_data is None:
            return ()
        if isinstance(narrative_data, dict):
            narrative_data = [narrative_data]

        cues = []
        for cue_data in narrative_data:
            cue_id = cue_data.get("video") or cue_data.get("id")
            if not cue_id:
                raise MissionConfigError(f"Narrative cue needs a 'video' or 'id': {cue_data!r}")
            kind_name = str(cue_data.get("type", "CAMP_MSG")).upper()
            if kind_name not in CUE_KIND_ALIASES:
                raise MissionConfigError(f"Unknown cue type '{kind_name}' for cue '{cue_id}'")
            kind = CUE_KIND_ALIASES[kind_name]
            blocking = cue_data.get("blocking", kind == CueKind.BRIEFING)
            cues.append(NarrativeCue(cue_id=str(cue_id), kind=kind, blocking=bool(blocking)))
        return tuple(cues)

    @staticmethod
    def _parse_transporter(data: dict[str, Any], points: dict[str, Vector2]) -> TransporterSpec:
        for key in ("place", "exit"):
            if key not in data:
                raise MissionConfigError(f"Transporter needs a '{key}' label")
        for key in ("place", "exit", "pickup"):
            if key in data and data[key] not in points:
                raise UnknownPointError(data[key])
        return TransporterSpec(
            place=data["place"],
            exit=data["exit"],
            pickup=data.get("pickup"),
            transporter_id=str(data.get("id", "transporter")),
            dispatch_on_start=bool(data.get("dispatch_on_start", True)),
            hold_cargo=bool(data.get("hold_cargo", False)),
        )

    @staticmethod
    def _parse_policy(data: dict[str, Any]) -> PolicySpec:
        mode_name = str(data.get("mode", "")).upper()
        if mode_name not in POLICY_MODE_ALIASES:
            raise MissionConfigError(f"Unknown win/loss mode '{data.get('mode')}'")
        mode = POLICY_MODE_ALIASES[mode_name]

        next_level = data.get("next_level")
        defeat = MissionConfigLoader._parse_conditions(data.get("defeat"))

        if mode == EvaluationMode.PRE_OFFWORLD:
            return PolicySpec.pre_offworld(next_level, defeat=defeat)
        if mode == EvaluationMode.CUSTOM:
            return PolicySpec.custom(data.get("predicate"), defeat=defeat, next_level=next_level)
        return PolicySpec.standard(
            victory=MissionConfigLoader._parse_conditions(data.get("victory")),
            defeat=defeat,
            victory_mode=str(data.get("victory_mode", "all")).lower(),
            next_level=next_level,
        )

    @staticmethod
    def _parse_conditions(items: Optional[list[Any]]) -> tuple[ConditionSpec, ...]:
        specs = []
        for item in items or []:
            if isinstance(item, str):
                specs.append(ConditionSpec(kind=item))
                continue
            params = dict(item)
            kind = params.pop("type", None)
            if not kind:
                raise MissionConfigError(f"Condition needs a 'type': {item!r}")
            specs.append(ConditionSpec(kind=str(kind), params=params))
        return tuple(specs)

    @staticmethod
    def _faction(value: Any, where: str):
        try:
            return parse_faction(value)
        except ValueError as e:
            raise MissionConfigError(f"{where}: {e}") from e
