#!/usr/bin/env python3

import argparse
import sys
from typing import Optional

from src.core.data import TransporterPhase
from src.core.events import CueRequested, EventType, MissionEvent, TransporterPhaseChanged
from src.mission.config import MissionConfigLoader, parse_difficulty, timer_multiplier
from src.mission.session import MissionSession


class Autopilot:
    """Scripted host that plays a mission to its end without a game engine.

    Cues finish on the tick after they are requested, and every transporter
    flight takes flight_time seconds. The transporter is recalled as soon as
    its cargo is out.
    """

    def __init__(
        self,
        session: MissionSession,
        step: float = 10.0,
        flight_time: float = 60.0,
        abort_at: Optional[float] = None,
    ):
        self.session = session
        self.step = step
        self.flight_time = flight_time
        self.abort_at = abort_at

        self._requested_cues: list[str] = []
        self._flight_started: Optional[float] = None

        session.subscribe(EventType.CUE_REQUESTED, self._on_cue_requested)
        session.subscribe(EventType.TRANSPORTER_PHASE_CHANGED, self._on_phase_changed)

    def _on_cue_requested(self, event: MissionEvent) -> None:
        if isinstance(event, CueRequested):
            self._requested_cues.append(event.cue_id)

    def _on_phase_changed(self, event: MissionEvent) -> None:
        if isinstance(event, TransporterPhaseChanged):
            self._flight_started = event.mission_time

    def _fly_transporter(self) -> None:
        transporter = self.session.transporter
        if transporter is None:
            return
        now = self.session.state.mission_time

        if transporter.phase == TransporterPhase.AWAITING_RECALL:
            self.session.recall_transporter()
        elif transporter.phase in (TransporterPhase.INBOUND_TO_DROP, TransporterPhase.OUTBOUND_TO_EXIT):
            if self._flight_started is not None and now - self._flight_started >= self.flight_time:
                destination = transporter.drop if transporter.phase == TransporterPhase.INBOUND_TO_DROP else transporter.exit
                if destination is not None:
                    self.session.transporter_arrived(destination)

    def run(self, max_time: float) -> dict:
        self.session.start()
        while self.session.is_running and self.session.state.mission_time < max_time:
            while self._requested_cues and self.session.is_running:
                self.session.cue_playback_complete(self._requested_cues.pop(0))

            if self.abort_at is not None and self.session.state.mission_time >= self.abort_at:
                self.session.abort()
                break

            self._fly_transporter()
            if self.session.is_running:
                self.session.advance_time(self.step)

        return self.session.summary()


def main():
    parser = argparse.ArgumentParser(
        description="Run a campaign mission with a scripted host",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py missions/cam1_3s.yaml
  python main.py missions/cam2_8s.yaml --difficulty hard
  python main.py missions/skirmish_hold.yaml --abort-at 120 --save-log
        """
    )
    parser.add_argument("mission", help="Path to a mission YAML file")
    parser.add_argument("--difficulty", default="medium", help="Difficulty tier (default: medium)")
    parser.add_argument("--step", type=float, default=10.0, help="Seconds per host tick")
    parser.add_argument("--flight-time", type=float, default=60.0, help="Seconds per transporter flight")
    parser.add_argument("--max-time", type=float, default=4 * 3600, help="Stop after this much mission time")
    parser.add_argument("--abort-at", type=float, default=None, help="Abort the mission at this mission time")
    parser.add_argument("--quiet", "-q", action="store_true", help="Do not echo the mission log")
    parser.add_argument("--save-log", action="store_true", help="Write the mission log to logs/")

    args = parser.parse_args()

    try:
        config = MissionConfigLoader.load_from_file(args.mission)
        multiplier = timer_multiplier(parse_difficulty(args.difficulty))
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(2)

    session = MissionSession(
        config,
        difficulty_multiplier=multiplier,
        log_echo=None if args.quiet else print,
    )
    autopilot = Autopilot(session, step=args.step, flight_time=args.flight_time, abort_at=args.abort_at)

    try:
        summary = autopilot.run(args.max_time)
    except KeyboardInterrupt:
        print("\n\nMission interrupted by user")
        sys.exit(130)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(2)

    print()
    print(f"Mission:  {config.name} ({summary['mission_id']})")
    print(f"Result:   {summary['result']}" + (f" ({summary['reason']})" if summary["reason"] else ""))
    if summary["payload"]:
        print(f"Next:     {summary['payload']}")
    print(f"Time:     {summary['mission_time']:.0f}s")

    if args.save_log:
        path = session.log_manager.save_log_to_file(title=config.mission_id)
        if path:
            print(f"Log:      {path}")

    sys.exit(0 if summary["result"] == "VICTORY" else 1)


if __name__ == "__main__":
    main()
