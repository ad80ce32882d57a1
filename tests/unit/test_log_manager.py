"""
Unit tests for the LogManager class.

Tests collection of LogMessage events, level and category filtering,
echoing and saving the mission log.
"""
from src.core.events import LogMessage
from src.mission.managers.log_manager import LogCategory, LogEntry, LogLevel, LogManager


def log_event(message: str, category: str = "TIMER", level: str = "INFO", mission_time: float = 0.0) -> LogMessage:
    return LogMessage(mission_time=mission_time, message=message, category=category, level=level, source="test")


class TestLogCollection:
    """Test log message collection from the event bus."""

    def test_collects_log_events(self, event_manager):
        log_manager = LogManager(event_manager)
        event_manager.publish(log_event("Mission timer started", mission_time=5.0))
        event_manager.drain()

        (entry,) = log_manager.messages
        assert entry.category == LogCategory.TIMER
        assert entry.level == LogLevel.INFO
        assert entry.mission_time == 5.0

    def test_unknown_category_and_level_fall_back(self, event_manager):
        log_manager = LogManager(event_manager)
        event_manager.publish(log_event("odd", category="RADAR", level="LOUD"))
        event_manager.drain()

        entry = log_manager.messages[0]
        assert entry.category == LogCategory.SESSION
        assert entry.level == LogLevel.INFO

    def test_bounded_buffer(self, event_manager):
        log_manager = LogManager(event_manager, max_messages=3)
        for i in range(5):
            log_manager.session(f"message {i}")
        assert [m.text for m in log_manager.messages] == ["message 2", "message 3", "message 4"]


class TestLogFiltering:
    """Test level and category filters."""

    def test_debug_hidden_by_default(self, event_manager):
        log_manager = LogManager(event_manager)
        log_manager.debug("noise")
        log_manager.warning("careful")

        assert [m.text for m in log_manager.get_messages()] == ["careful"]
        assert not log_manager.is_debug_enabled()

        log_manager.set_log_level(LogLevel.DEBUG)
        assert log_manager.is_debug_enabled()
        assert len(log_manager.get_messages()) == 2

    def test_disabled_category(self, event_manager):
        log_manager = LogManager(event_manager)
        log_manager.log("tick", LogCategory.TIMER)
        log_manager.disable_category(LogCategory.TIMER)
        assert log_manager.get_messages() == []

        log_manager.enable_category(LogCategory.TIMER)
        assert len(log_manager.get_messages(count=1)) == 1

    def test_echo_only_visible_messages(self, event_manager):
        lines = []
        log_manager = LogManager(event_manager, echo=lines.append)
        log_manager.debug("noise")
        log_manager.log("Transporter landed", LogCategory.TRANSPORTER, mission_time=75)

        assert lines == ["[T+01:15] [TRN] Transporter landed"]


class TestLogEntryFormat:
    """Test message formatting."""

    def test_format(self):
        entry = LogEntry("Zone registered", LogCategory.ZONE, mission_time=3661)
        assert entry.format() == "[ZON] Zone registered"
        assert entry.format(include_time=True, include_category=False) == "[T+61:01] Zone registered"


class TestSaveLog:
    """Test writing the log to disk."""

    def test_save_log_to_file(self, event_manager, tmp_path):
        log_manager = LogManager(event_manager)
        log_manager.debug("hidden but saved")
        log_manager.session("visible")

        path = log_manager.save_log_to_file(log_dir=str(tmp_path), title="cam1_3s")

        assert path is not None
        content = open(path, encoding="utf-8").read()
        assert content.startswith("cam1_3s\n")
        assert "[DEBUG] [T+00:00] [DBG] hidden but saved" in content
        assert "visible" in content
