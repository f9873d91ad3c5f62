"""Fixture lineup, event and statistic records consumed by scoring."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .player import Position


class LineupType(Enum):
    """Provider lineup type codes."""

    STARTER = 11
    BENCH = 12


class EventType(Enum):
    """Provider event type codes."""

    GOAL = 14
    OWN_GOAL = 15
    PENALTY = 16
    MISSED_PENALTY = 17
    SUBSTITUTION = 18
    YELLOWCARD = 19
    REDCARD = 20
    YELLOWREDCARD = 21


class StatType(Enum):
    """Provider team statistic type codes used by scoring."""

    OFFSIDES = 51
    SAVES = 57
    SHOTS_BLOCKED = 58
    TACKLES = 78
    SHOTS_ON_TARGET = 86
    INTERCEPTIONS = 100
    PASS_ACCURACY = 1605


@dataclass
class FixtureList:
    """Fixtures belonging to one round."""

    fixture_ids: list[int] = field(default_factory=list)
    matchday: Optional[int] = None


@dataclass
class LineupEntry:
    """
    A player listed in a fixture lineup.

    Attributes:
        player_id: Provider player identifier.
        team_id: Team the player lines up for.
        is_starter: True for the starting eleven, False for the bench.
        player_name: Display name, used to resolve events without an id.
        position: Position reported for this fixture, if any.
    """

    player_id: int
    team_id: int
    is_starter: bool
    player_name: str = ""
    position: Optional[Position] = None


@dataclass
class FixtureEvent:
    """
    A match event.

    Attributes:
        type_code: Provider event type code (see EventType).
        team_id: Team the event is attributed to.
        player_id: Primary player (scorer, booked player, player coming on).
        related_player_id: Secondary player (assister, player going off).
        player_name: Primary player's name.
        related_player_name: Secondary player's name.
    """

    type_code: int
    team_id: Optional[int] = None
    player_id: Optional[int] = None
    related_player_id: Optional[int] = None
    player_name: str = ""
    related_player_name: str = ""

    @property
    def event_type(self) -> Optional[EventType]:
        """The known event type, or None for codes scoring ignores."""
        try:
            return EventType(self.type_code)
        except ValueError:
            return None


@dataclass
class FixtureStatistic:
    """A team-level statistic for one fixture."""

    type_code: int
    team_id: int
    value: float


@dataclass
class PlayerScore:
    """Fantasy points for one player in a fixture or round."""

    player_id: int
    points: int
    player_name: str = ""
