"""
Log management for mission messages and debugging.

This module provides centralized logging with categorization, filtering and
bounded storage. Every mission manager reports through LogMessage events on the
event bus; the LogManager is the single subscriber that keeps them.
"""
import os
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Callable, Optional, TYPE_CHECKING

from ...core.events import EventType, LogMessage as LogEvent, MissionEvent

if TYPE_CHECKING:
    from ...core.events import EventManager


class LogCategory(Enum):
    """Categories for log messages."""
    SESSION = auto()      # Mission lifecycle messages
    CONFIG = auto()       # Configuration loading and validation
    ZONE = auto()         # Zone registration and violations
    TIMER = auto()        # Mission countdown
    TRANSPORTER = auto()  # Transporter phases
    NARRATIVE = auto()    # Narrative cues
    OUTCOME = auto()      # Win/loss evaluation
    WARNING = auto()      # Warning messages
    ERROR = auto()        # Error messages
    DEBUG = auto()        # Debug messages


class LogLevel(Enum):
    """Log levels for filtering."""
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


CATEGORY_TAGS = {
    LogCategory.SESSION: "SES",
    LogCategory.CONFIG: "CFG",
    LogCategory.ZONE: "ZON",
    LogCategory.TIMER: "TMR",
    LogCategory.TRANSPORTER: "TRN",
    LogCategory.NARRATIVE: "NAR",
    LogCategory.OUTCOME: "OUT",
    LogCategory.WARNING: "WRN",
    LogCategory.ERROR: "ERR",
    LogCategory.DEBUG: "DBG",
}


@dataclass
class LogEntry:
    """A single log message with metadata."""
    text: str
    category: LogCategory
    level: LogLevel = LogLevel.INFO
    mission_time: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)

    def format(self, include_time: bool = False, include_category: bool = True) -> str:
        """Format the message for display."""
        parts = []

        if include_time:
            minutes, seconds = divmod(int(self.mission_time), 60)
            parts.append(f"[T+{minutes:02d}:{seconds:02d}]")

        if include_category:
            parts.append(f"[{CATEGORY_TAGS.get(self.category, '???')}]")

        parts.append(self.text)
        return " ".join(parts)


class LogManager:
    """Collects mission log messages with categorization and filtering."""

    def __init__(
        self,
        event_manager: "EventManager",
        max_messages: int = 1000,
        default_level: LogLevel = LogLevel.INFO,
        echo: Optional[Callable[[str], None]] = None,
    ):
        """Initialize the log manager.

        Args:
            event_manager: Event manager to receive LogMessage events from
            max_messages: Maximum number of messages to store in the buffer
            default_level: Default log level for filtering
            echo: Optional callback receiving each visible formatted message
        """
        self.messages: deque[LogEntry] = deque(maxlen=max_messages)
        self.log_level = default_level
        self.enabled_categories = set(LogCategory)
        self.event_manager = event_manager
        self.echo = echo

        self.event_manager.subscribe(
            EventType.LOG_MESSAGE,
            self._handle_log_message_event,
            subscriber_name="LogManager.log_message",
        )

    def _handle_log_message_event(self, event: MissionEvent) -> None:
        """Handle log message events from the event system."""
        if not isinstance(event, LogEvent):
            return

        try:
            category = LogCategory[event.category.upper()]
        except KeyError:
            category = LogCategory.SESSION
        try:
            level = LogLevel[event.level.upper()]
        except KeyError:
            level = LogLevel.INFO

        self.log(event.message, category, level, event.mission_time)

    def log(
        self,
        text: str,
        category: LogCategory = LogCategory.SESSION,
        level: LogLevel = LogLevel.INFO,
        mission_time: float = 0.0,
    ) -> None:
        """Add a message to the log.

        Messages are always stored; filters only apply on retrieval and echo.
        """
        entry = LogEntry(text=text, category=category, level=level, mission_time=mission_time)
        self.messages.append(entry)
        if self.echo is not None and self._is_visible(entry):
            self.echo(entry.format(include_time=True))

    # Convenience methods for common categories
    def session(self, text: str) -> None:
        """Log a session message."""
        self.log(text, LogCategory.SESSION)

    def warning(self, text: str) -> None:
        """Log a warning message."""
        self.log(text, LogCategory.WARNING, LogLevel.WARNING)

    def error(self, text: str) -> None:
        """Log an error message."""
        self.log(text, LogCategory.ERROR, LogLevel.ERROR)

    def debug(self, text: str) -> None:
        """Log a debug message."""
        self.log(text, LogCategory.DEBUG, LogLevel.DEBUG)

    def _is_visible(self, entry: LogEntry) -> bool:
        return entry.category in self.enabled_categories and entry.level.value >= self.log_level.value

    def get_messages(
        self,
        count: Optional[int] = None,
        categories: Optional[set[LogCategory]] = None,
    ) -> list[LogEntry]:
        """Get recent messages, optionally filtered by category.

        Args:
            count: Maximum number of messages to return (None for all)
            categories: Set of categories to include (None for all visible)

        Returns:
            List of recent messages
        """
        if categories:
            filtered = [msg for msg in self.messages
                        if msg.category in categories and msg.category in self.enabled_categories]
        else:
            filtered = [msg for msg in self.messages if self._is_visible(msg)]

        if count is not None and count < len(filtered):
            return filtered[-count:]
        return filtered

    def clear(self) -> None:
        """Clear all messages from the log."""
        self.messages.clear()

    def enable_category(self, category: LogCategory) -> None:
        self.enabled_categories.add(category)

    def disable_category(self, category: LogCategory) -> None:
        self.enabled_categories.discard(category)

    def set_log_level(self, level: LogLevel) -> None:
        """Set the minimum log level."""
        self.log_level = level

    def is_debug_enabled(self) -> bool:
        """Check if debug messages are currently enabled."""
        return LogCategory.DEBUG in self.enabled_categories and self.log_level == LogLevel.DEBUG

    def save_log_to_file(self, log_dir: str = "logs", title: str = "Mission Log") -> Optional[str]:
        """Save all messages to a timestamped log file.

        Returns:
            Path of the written file, or None if saving failed
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = os.path.join(log_dir, f"mission_{timestamp}.log")

        try:
            os.makedirs(log_dir, exist_ok=True)
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write(f"{title}\n")
                f.write(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
                f.write("=" * 60 + "\n\n")

                if not self.messages:
                    f.write("No messages to save.\n")
                # Save ALL messages from buffer, including debug level (ignore current filters)
                for msg in self.messages:
                    f.write(f"[{msg.level.name}] {msg.format(include_time=True)}\n")
        except OSError as e:
            self.error(f"Failed to save log file: {e}")
            return None

        self.session(f"Mission log saved to {filepath}")
        return filepath
