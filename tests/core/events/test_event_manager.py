"""
Unit tests for the Event Manager system.

Tests the event bus that the mission managers use to talk to each other
and to the host: subscription, priority ordering, follow-up events and
subscriber error isolation.
"""

from unittest.mock import Mock

from src.core.data import Faction
from src.core.events.event_manager import EventPriority, QueuedEvent
from src.core.events.events import EventType, TimeElapsed, UnitDestroyed, UnitSpawned


def spawned(unit_id: str = "u1", mission_time: float = 0.0) -> UnitSpawned:
    return UnitSpawned(mission_time=mission_time, unit_id=unit_id, faction=Faction.PLAYER)


class TestQueuedEvent:
    """Test QueuedEvent functionality."""

    def test_queued_event_creation(self):
        event = spawned()
        queued = QueuedEvent(event=event, priority=EventPriority.HIGH, source="test")

        assert queued.event == event
        assert queued.priority == EventPriority.HIGH
        assert queued.source == "test"

    def test_higher_priority_sorts_first(self):
        low = QueuedEvent(spawned(), EventPriority.LOW)
        normal = QueuedEvent(spawned(), EventPriority.NORMAL)
        high = QueuedEvent(spawned(), EventPriority.HIGH)
        critical = QueuedEvent(spawned(), EventPriority.CRITICAL)

        assert sorted([low, normal, critical, high]) == [critical, high, normal, low]

    def test_same_priority_keeps_publish_order(self):
        first = QueuedEvent(spawned("a"), EventPriority.NORMAL)
        second = QueuedEvent(spawned("b"), EventPriority.NORMAL)

        assert first < second
        assert not second < first


class TestEventManager:
    """Test EventManager functionality."""

    def test_event_manager_creation(self, event_manager):
        stats = event_manager.get_statistics()
        assert not event_manager.enable_debug_logging
        assert stats['events_published'] == 0
        assert stats['events_processed'] == 0

    def test_subscribe_and_publish(self, event_manager):
        subscriber = Mock()
        event_manager.subscribe(EventType.UNIT_SPAWNED, subscriber)

        event = spawned()
        event_manager.publish(event)
        assert subscriber.call_count == 0  # Queued until processed

        event_manager.process_events()
        subscriber.assert_called_once_with(event)

    def test_subscribers_only_receive_their_type(self, event_manager):
        spawned_sub = Mock()
        destroyed_sub = Mock()
        event_manager.subscribe(EventType.UNIT_SPAWNED, spawned_sub)
        event_manager.subscribe(EventType.UNIT_DESTROYED, destroyed_sub)

        event_manager.publish(spawned())
        event_manager.process_events()

        assert spawned_sub.call_count == 1
        assert destroyed_sub.call_count == 0

    def test_universal_subscriber(self, event_manager):
        subscriber = Mock()
        event_manager.subscribe_all(subscriber)

        event_manager.publish(spawned())
        event_manager.publish(TimeElapsed(mission_time=1.0, delta=1.0))
        event_manager.process_events()

        assert subscriber.call_count == 2

    def test_unsubscribe(self, event_manager):
        subscriber = Mock()
        event_manager.subscribe(EventType.UNIT_SPAWNED, subscriber)

        assert event_manager.unsubscribe(EventType.UNIT_SPAWNED, subscriber)
        assert not event_manager.unsubscribe(EventType.UNIT_SPAWNED, subscriber)

        event_manager.publish(spawned())
        event_manager.process_events()
        subscriber.assert_not_called()

    def test_priority_order_within_batch(self, event_manager):
        received = []
        event_manager.subscribe_all(lambda e: received.append(e.unit_id))

        event_manager.publish(spawned("low"), EventPriority.LOW)
        event_manager.publish(spawned("normal"), EventPriority.NORMAL)
        event_manager.publish(spawned("critical"), EventPriority.CRITICAL)
        event_manager.process_events()

        assert received == ["critical", "normal", "low"]

    def test_process_events_leaves_follow_ups_queued(self, event_manager):
        def on_spawn(event):
            event_manager.publish(UnitDestroyed(mission_time=0.0, unit_id=event.unit_id, faction=event.faction))

        event_manager.subscribe(EventType.UNIT_SPAWNED, on_spawn)
        event_manager.publish(spawned())

        assert event_manager.process_events() == 1
        assert event_manager.has_queued_events()

    def test_drain_processes_follow_ups(self, event_manager):
        destroyed_sub = Mock()

        def on_spawn(event):
            event_manager.publish(UnitDestroyed(mission_time=0.0, unit_id=event.unit_id, faction=event.faction))

        event_manager.subscribe(EventType.UNIT_SPAWNED, on_spawn)
        event_manager.subscribe(EventType.UNIT_DESTROYED, destroyed_sub)
        event_manager.publish(spawned())

        assert event_manager.drain() == 2
        assert not event_manager.has_queued_events()
        destroyed_sub.assert_called_once()

    def test_max_events_requeues_the_rest(self, event_manager):
        received = []
        event_manager.subscribe_all(lambda e: received.append(e.unit_id))
        for unit_id in ("a", "b", "c"):
            event_manager.publish(spawned(unit_id))

        assert event_manager.process_events(max_events=2) == 2
        assert received == ["a", "b"]
        assert event_manager.process_events() == 1
        assert received == ["a", "b", "c"]

    def test_subscriber_error_is_isolated(self, event_manager):
        failing = Mock(side_effect=RuntimeError("boom"))
        healthy = Mock()
        event_manager.subscribe(EventType.UNIT_SPAWNED, failing)
        event_manager.subscribe(EventType.UNIT_SPAWNED, healthy)

        event_manager.publish(spawned())
        event_manager.process_events()

        healthy.assert_called_once()
        assert event_manager.get_statistics()['subscriber_errors'] == 1

    def test_publish_immediate_skips_queue(self, event_manager):
        subscriber = Mock()
        event_manager.subscribe(EventType.UNIT_SPAWNED, subscriber)

        event_manager.publish_immediate(spawned())

        subscriber.assert_called_once()
        assert not event_manager.has_queued_events()

    def test_clear_queue(self, event_manager):
        event_manager.publish(spawned("a"))
        event_manager.publish(spawned("b"))

        assert event_manager.clear_queue() == 2
        assert not event_manager.has_queued_events()

    def test_recent_events(self, event_manager):
        event_manager.publish(spawned(mission_time=12.0), source="host")
        event_manager.process_events()

        recent = event_manager.get_recent_events(1)
        assert recent[0]['event_type'] == "UnitSpawned"
        assert recent[0]['mission_time'] == 12.0
        assert recent[0]['source'] == "host"

    def test_debug_callback(self, event_manager):
        messages = []
        event_manager.enable_debug_logging = True
        event_manager.set_debug_callback(messages.append)

        event_manager.publish(spawned())

        assert any(message.startswith("[EVENT] Published UnitSpawned") for message in messages)

    def test_shutdown(self, event_manager):
        subscriber = Mock()
        event_manager.subscribe(EventType.UNIT_SPAWNED, subscriber)
        event_manager.publish(spawned())

        event_manager.shutdown()
        event_manager.publish(spawned())
        event_manager.process_events()

        subscriber.assert_not_called()
