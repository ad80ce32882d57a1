"""
Unit tests for the TransporterController class.

Tests the forward-only phase machine of a transporter run: dispatch,
landing, cargo release, recall and departure, plus rejection of
out-of-order requests and mismatched arrival reports.
"""
import pytest
from unittest.mock import Mock

from src.core.data import TransporterPhase, Vector2
from src.core.errors import AlreadyDispatchedError, NotReadyError, UnexpectedArrivalError
from src.core.events import EventType, TransporterArrived
from src.mission.managers.transporter_controller import TransporterController

DROP = Vector2.from_xy(11, 52)
EXIT = Vector2.from_xy(39, 126)


@pytest.fixture
def transporter(event_manager, mission_state):
    return TransporterController(event_manager, mission_state, exit_point=EXIT)


def run_to_awaiting_recall(transporter: TransporterController) -> None:
    transporter.dispatch(EXIT, DROP)
    transporter.arrive(DROP)


class TestTransporterLifecycle:
    """Test the full run through every phase."""

    def test_initial_phase(self, transporter):
        assert transporter.phase == TransporterPhase.IDLE
        assert not transporter.has_departed

    def test_full_run(self, transporter, event_manager):
        departed_sub = Mock()
        event_manager.subscribe(EventType.TRANSPORTER_DEPARTED, departed_sub)

        transporter.dispatch(EXIT, DROP)
        assert transporter.phase == TransporterPhase.INBOUND_TO_DROP

        transporter.arrive(DROP)
        assert transporter.phase == TransporterPhase.AWAITING_RECALL

        transporter.recall()
        assert transporter.phase == TransporterPhase.OUTBOUND_TO_EXIT

        transporter.arrive(EXIT)
        assert transporter.has_departed
        event_manager.drain()

        departed_sub.assert_called_once()
        assert transporter.phase_history == [
            TransporterPhase.IDLE,
            TransporterPhase.INBOUND_TO_DROP,
            TransporterPhase.UNLOADING,
            TransporterPhase.AWAITING_RECALL,
            TransporterPhase.OUTBOUND_TO_EXIT,
            TransporterPhase.DEPARTED,
        ]

    def test_every_transition_is_published(self, transporter, event_manager):
        changes = []
        event_manager.subscribe(EventType.TRANSPORTER_PHASE_CHANGED, changes.append)

        run_to_awaiting_recall(transporter)
        event_manager.drain()

        assert [(c.old_phase, c.new_phase) for c in changes] == [
            (TransporterPhase.IDLE, TransporterPhase.INBOUND_TO_DROP),
            (TransporterPhase.INBOUND_TO_DROP, TransporterPhase.UNLOADING),
            (TransporterPhase.UNLOADING, TransporterPhase.AWAITING_RECALL),
        ]

    def test_recall_to_explicit_exit(self, transporter):
        other_exit = Vector2.from_xy(0, 0)
        run_to_awaiting_recall(transporter)
        transporter.recall(other_exit)
        transporter.arrive(other_exit)
        assert transporter.has_departed


class TestHeldCargo:
    """Test runs where the host releases the cargo explicitly."""

    def test_hold_cargo_waits_for_release(self, event_manager, mission_state):
        transporter = TransporterController(event_manager, mission_state, exit_point=EXIT, hold_cargo=True)
        transporter.dispatch(EXIT, DROP)
        transporter.arrive(DROP)
        assert transporter.phase == TransporterPhase.UNLOADING

        with pytest.raises(NotReadyError):
            transporter.recall()

        transporter.release_cargo()
        assert transporter.phase == TransporterPhase.AWAITING_RECALL

    def test_release_cargo_when_not_unloading(self, transporter):
        with pytest.raises(NotReadyError) as exc_info:
            transporter.release_cargo()
        assert exc_info.value.action == "release cargo"


class TestIllegalRequests:
    """Test rejection of out-of-order requests."""

    def test_double_dispatch(self, transporter):
        transporter.dispatch(EXIT, DROP)
        with pytest.raises(AlreadyDispatchedError):
            transporter.dispatch(EXIT, DROP)
        assert transporter.phase == TransporterPhase.INBOUND_TO_DROP

    def test_recall_before_landing(self, transporter):
        transporter.dispatch(EXIT, DROP)
        with pytest.raises(NotReadyError):
            transporter.recall()

    def test_recall_without_exit(self, event_manager, mission_state):
        transporter = TransporterController(event_manager, mission_state)
        run_to_awaiting_recall(transporter)
        with pytest.raises(NotReadyError):
            transporter.recall()
        assert transporter.phase == TransporterPhase.AWAITING_RECALL

    def test_arrival_while_idle(self, transporter):
        with pytest.raises(UnexpectedArrivalError):
            transporter.arrive(DROP)

    def test_arrival_at_wrong_position(self, transporter):
        transporter.dispatch(EXIT, DROP)
        with pytest.raises(UnexpectedArrivalError):
            transporter.arrive(DROP + Vector2(1, 0))
        assert transporter.phase == TransporterPhase.INBOUND_TO_DROP

    def test_arrival_radius(self, event_manager, mission_state):
        transporter = TransporterController(event_manager, mission_state, exit_point=EXIT, arrival_radius=2)
        transporter.dispatch(EXIT, DROP)
        transporter.arrive(DROP + Vector2(1, 1))
        assert transporter.phase == TransporterPhase.AWAITING_RECALL

    def test_departed_is_terminal(self, transporter):
        run_to_awaiting_recall(transporter)
        transporter.recall()
        transporter.arrive(EXIT)

        with pytest.raises(AlreadyDispatchedError):
            transporter.dispatch(EXIT, DROP)
        with pytest.raises(UnexpectedArrivalError):
            transporter.arrive(EXIT)


class TestArrivalEvents:
    """Test arrivals reported through the event bus."""

    def test_arrival_event_advances_phase(self, transporter, event_manager):
        transporter.dispatch(EXIT, DROP)
        event_manager.publish(TransporterArrived(mission_time=0.0, position=DROP))
        event_manager.drain()
        assert transporter.phase == TransporterPhase.AWAITING_RECALL

    def test_bad_arrival_event_is_dropped(self, transporter, event_manager):
        event_manager.publish(TransporterArrived(mission_time=0.0, position=DROP))
        event_manager.drain()

        assert transporter.phase == TransporterPhase.IDLE
        assert event_manager.get_statistics()['subscriber_errors'] == 0


class TestForceAbort:
    """Test grounding the transporter on mission abort."""

    def test_force_abort_skips_departure_event(self, transporter, event_manager):
        departed_sub = Mock()
        event_manager.subscribe(EventType.TRANSPORTER_DEPARTED, departed_sub)
        transporter.dispatch(EXIT, DROP)

        assert transporter.force_abort()
        event_manager.drain()

        assert transporter.phase == TransporterPhase.DEPARTED
        assert transporter.aborted
        departed_sub.assert_not_called()

    def test_force_abort_after_departure(self, transporter):
        run_to_awaiting_recall(transporter)
        transporter.recall()
        transporter.arrive(EXIT)
        assert not transporter.force_abort()
