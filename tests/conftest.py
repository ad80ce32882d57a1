"""
Basic test fixtures for the mission engine test suite.

Provides simple fixtures for the event bus, mission state and a small
transporter mission configuration.
"""

import sys
import os
import pytest

# Add the project root to the Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from src.core.data import CueKind, Faction, Rect, Vector2
from src.core.events.event_manager import EventManager
from src.core.mission_state import MissionState
from src.mission.config import (
    MissionConfig,
    NarrativeCue,
    PolicySpec,
    TimerSpec,
    TransporterSpec,
    ZoneSpec,
)

MISSIONS_DIR = os.path.join(project_root, "missions")


@pytest.fixture
def event_manager():
    """Create an event manager for testing."""
    return EventManager(enable_debug_logging=False)


@pytest.fixture
def mission_state():
    """Create a fresh mission state for testing."""
    return MissionState()


@pytest.fixture
def sample_vector():
    """Create a sample Vector2 for testing."""
    return Vector2(2, 3)


class ConfigBuilder:
    """Builder for mission configurations used across tests."""

    POINTS = {
        "startPos": Vector2.from_xy(13, 52),
        "trPlace": Vector2.from_xy(11, 52),
        "trExit": Vector2.from_xy(39, 126),
    }

    @staticmethod
    def offworld(**overrides) -> MissionConfig:
        """Transporter mission shaped like the alpha 3 intermission."""
        values = dict(
            mission_id="test_offworld",
            name="Test Offworld",
            policy=PolicySpec.pre_offworld("alpha5-offworld"),
            points=dict(ConfigBuilder.POINTS),
            zones=(ZoneSpec("lz", Rect.from_corners(10, 51, 12, 53), Faction.PLAYER),),
            timer=TimerSpec(base_duration=3600),
            narrative=(NarrativeCue("SB1_3_UPDATE", CueKind.BRIEFING, blocking=True),),
            transporter=TransporterSpec(place="trPlace", exit="trExit"),
            start_view="startPos",
        )
        values.update(overrides)
        return MissionConfig(**values)


@pytest.fixture
def offworld_config():
    """A pre-offworld mission configuration."""
    return ConfigBuilder.offworld()


@pytest.fixture
def config_builder():
    """Builder for custom mission configurations."""
    return ConfigBuilder


@pytest.fixture
def missions_dir():
    """Directory holding the bundled mission files."""
    return MISSIONS_DIR
