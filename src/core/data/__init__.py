"""Core data structures and definitions.

This package contains fundamental data types and mission definitions:
- data_structures.py: Vector2, Rect and VectorArray for spatial operations
- mission_enums.py: Centralized enums for factions, phases, results and tiers
"""

from .data_structures import Vector2, Rect, VectorArray
from .mission_enums import (
    Faction,
    TransporterPhase,
    CueKind,
    MissionResult,
    EvaluationMode,
    ConditionStatus,
    SessionState,
    DifficultyTier,
    FACTION_NAMES,
    TRANSPORTER_PHASE_NAMES,
    parse_faction,
)

__all__ = [
    "Vector2",
    "Rect",
    "VectorArray",
    "Faction",
    "TransporterPhase",
    "CueKind",
    "MissionResult",
    "EvaluationMode",
    "ConditionStatus",
    "SessionState",
    "DifficultyTier",
    "FACTION_NAMES",
    "TRANSPORTER_PHASE_NAMES",
    "parse_faction",
]
