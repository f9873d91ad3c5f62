"""Data models for fantasy drafting and scoring."""

from .player import DEFAULT_STAR_RATING, Player, Position
from .formation import FORMATIONS, GOALKEEPER_SLOTS, Formation, get_formation
from .round import Round
from .squad import (
    CANDIDATES_PER_SLOT,
    CandidateSlot,
    FinalizedSquad,
    SquadStatus,
    TemporarySquad,
    slots_from_json,
    slots_to_json,
)
from .fixture import (
    EventType,
    FixtureEvent,
    FixtureList,
    FixtureStatistic,
    LineupEntry,
    LineupType,
    PlayerScore,
    StatType,
)

__all__ = [
    # Player
    "DEFAULT_STAR_RATING",
    "Player",
    "Position",
    # Formation
    "FORMATIONS",
    "GOALKEEPER_SLOTS",
    "Formation",
    "get_formation",
    # Round
    "Round",
    # Squad
    "CANDIDATES_PER_SLOT",
    "CandidateSlot",
    "FinalizedSquad",
    "SquadStatus",
    "TemporarySquad",
    "slots_from_json",
    "slots_to_json",
    # Fixture
    "EventType",
    "FixtureEvent",
    "FixtureList",
    "FixtureStatistic",
    "LineupEntry",
    "LineupType",
    "PlayerScore",
    "StatType",
]
