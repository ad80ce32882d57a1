"""Manager systems for mission logic coordination.

This package contains all manager classes that coordinate different aspects
of a running mission through the event-driven architecture.
"""

from .log_manager import LogManager, LogLevel, LogCategory
from .mission_timer import MissionTimer
from .narrative_sequencer import NarrativeSequencer
from .transporter_controller import TransporterController
from .win_loss_evaluator import WinLossEvaluator
from .zone_registry import Zone, ZoneRegistry

__all__ = [
    "LogManager",
    "LogLevel",
    "LogCategory",
    "MissionTimer",
    "NarrativeSequencer",
    "TransporterController",
    "WinLossEvaluator",
    "Zone",
    "ZoneRegistry",
]
