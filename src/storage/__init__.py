"""Relational persistence for players, rounds, squads and round points."""

from .database import DatabaseManager
from .repositories import (
    PlayerRepository,
    RoundPointsRepository,
    RoundRepository,
    SquadRepository,
)
from .tables import Base, PlayerRow, RoundPointsRow, RoundRow, RosterLinkRow, SquadRow

__all__ = [
    # Database
    "DatabaseManager",
    # Repositories
    "PlayerRepository",
    "RoundPointsRepository",
    "RoundRepository",
    "SquadRepository",
    # Tables
    "Base",
    "PlayerRow",
    "RoundPointsRow",
    "RoundRow",
    "RosterLinkRow",
    "SquadRow",
]
