"""Exception taxonomy for the mission engine.

Configuration errors (MissionConfigError) are fatal to mission start and are
surfaced to the campaign shell. State errors (MissionStateError) reject a single
illegal request; the session logs them and carries on.
"""

from typing import Optional


class MissionError(Exception):
    """Base exception for mission engine errors."""
    pass


# Configuration-time errors

class MissionConfigError(MissionError, ValueError):
    """Raised when a mission configuration is malformed."""
    pass


class InvalidGeometryError(MissionConfigError):
    """Raised when a zone rectangle or point is malformed or off the map."""

    def __init__(self, zone_id: str, reason: str, kind: str = "zone"):
        super().__init__(f"Invalid geometry for {kind} '{zone_id}': {reason}")
        self.zone_id = zone_id
        self.reason = reason


class InvalidPolicyError(MissionConfigError):
    """Raised when a win/loss policy references unknown zones or predicates."""

    def __init__(self, reason: str, mode: Optional[str] = None):
        prefix = f"Invalid {mode} policy" if mode else "Invalid policy"
        super().__init__(f"{prefix}: {reason}")
        self.reason = reason
        self.mode = mode


class DuplicateZoneError(MissionConfigError):
    """Raised when a zone id is registered twice."""

    def __init__(self, zone_id: str):
        super().__init__(f"Zone '{zone_id}' is already registered")
        self.zone_id = zone_id


class UnknownZoneError(MissionConfigError):
    """Raised when a zone id is not registered."""

    def __init__(self, zone_id: str):
        super().__init__(f"Unknown zone '{zone_id}'")
        self.zone_id = zone_id


class UnknownPointError(MissionConfigError):
    """Raised when a configuration refers to a label that is not defined."""

    def __init__(self, label: str):
        super().__init__(f"Unknown label '{label}'")
        self.label = label


# Runtime state-transition errors

class MissionStateError(MissionError):
    """Raised when a request is illegal in the current state."""
    pass


class AlreadyDispatchedError(MissionStateError):
    """Raised when the transporter is dispatched while not idle."""

    def __init__(self, phase_name: str):
        super().__init__(f"Transporter already dispatched (phase: {phase_name})")
        self.phase_name = phase_name


class NotReadyError(MissionStateError):
    """Raised when the transporter is recalled before it awaits recall."""

    def __init__(self, phase_name: str, action: str = "recall"):
        super().__init__(f"Transporter not ready to {action} (phase: {phase_name})")
        self.phase_name = phase_name
        self.action = action


class UnexpectedArrivalError(MissionStateError):
    """Raised when an arrival is reported that does not match the flight plan."""
    pass


class AlreadyExpiredError(MissionStateError):
    """Raised when the mission timer is restarted after it expired."""

    def __init__(self):
        super().__init__("Mission timer has already expired and cannot be restarted")


class CueBlockedError(MissionStateError):
    """Raised when advancing past a blocking cue that has not completed."""

    def __init__(self, pending_cue_id: str):
        super().__init__(f"Blocking cue '{pending_cue_id}' has not completed playback")
        self.pending_cue_id = pending_cue_id


class CueReplayError(MissionStateError):
    """Raised when a completion is reported for a cue that is not playing."""

    def __init__(self, cue_id: str):
        super().__init__(f"Cue '{cue_id}' is not awaiting completion")
        self.cue_id = cue_id


class NarrativeExhaustedError(MissionStateError):
    """Raised when advancing an empty or fully played narrative queue."""

    def __init__(self):
        super().__init__("No unplayed narrative cues remain")


class StaticZoneError(MissionStateError):
    """Raised when mutating a zone that was not registered as dynamic."""

    def __init__(self, zone_id: str):
        super().__init__(f"Zone '{zone_id}' is static and cannot be changed after start")
        self.zone_id = zone_id


class RegistrySealedError(MissionStateError):
    """Raised when registering zones after the mission has started."""

    def __init__(self, zone_id: str):
        super().__init__(f"Cannot register zone '{zone_id}': registry is sealed")
        self.zone_id = zone_id


class SessionStateError(MissionStateError):
    """Raised when a session operation is illegal in its lifecycle state."""
    pass
