"""Difficulty scaling helpers for the campaign shell.

The mission engine never interprets difficulty tiers; the shell resolves the
current tier to a scalar here and passes it to the session.
"""

from ...core.data import DifficultyTier

TIMER_MULTIPLIERS = {
    DifficultyTier.SUPER_EASY: 2.0,
    DifficultyTier.EASY: 1.5,
    DifficultyTier.MEDIUM: 1.0,
    DifficultyTier.HARD: 0.85,
    DifficultyTier.INSANE: 0.7,
}


def timer_multiplier(tier: DifficultyTier) -> float:
    """Timer scale for a difficulty tier (easier tiers get more time)."""
    return TIMER_MULTIPLIERS[tier]


def parse_difficulty(name: str) -> DifficultyTier:
    """Parse a tier name such as 'easy' or 'SUPER_EASY'."""
    key = name.strip().upper().replace("-", "_").replace(" ", "_")
    if key == "SUPEREASY":
        key = "SUPER_EASY"
    try:
        return DifficultyTier[key]
    except KeyError:
        valid = ", ".join(t.name.lower() for t in DifficultyTier)
        raise ValueError(f"Unknown difficulty '{name}' (expected one of: {valid})") from None


def hours_to_seconds(hours: float) -> float:
    return hours * 3600


def minutes_to_seconds(minutes: float) -> float:
    return minutes * 60
