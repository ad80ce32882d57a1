"""Mission configuration.

- mission_config.py: Immutable MissionConfig and its parts
- config_loader.py: YAML loading of mission files
- difficulty.py: Difficulty tier to timer multiplier resolution
"""

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
from .config_loader import MissionConfigLoader
from .difficulty import timer_multiplier, parse_difficulty, hours_to_seconds, minutes_to_seconds

__all__ = [
    "ConditionSpec",
    "MissionConfig",
    "NarrativeCue",
    "NarrativeOptions",
    "PolicySpec",
    "TimerSpec",
    "TransporterSpec",
    "ZoneSpec",
    "MissionConfigLoader",
    "timer_multiplier",
    "parse_difficulty",
    "hours_to_seconds",
    "minutes_to_seconds",
]
