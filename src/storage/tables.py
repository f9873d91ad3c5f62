"""SQLAlchemy table definitions."""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..models.player import DEFAULT_STAR_RATING


class Base(DeclarativeBase):
    """Declarative base for every table."""

    pass


class PlayerRow(Base):
    """Player directory entry."""

    __tablename__ = "players"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    team_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    position_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    star_rating: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True, default=DEFAULT_STAR_RATING
    )
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class RoundRow(Base):
    """Competition round (matchday)."""

    __tablename__ = "rounds"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    season_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    starting_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    ending_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class SquadRow(Base):
    """A squad, in progress or finalized, for one (user, league, round)."""

    __tablename__ = "squads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    league_id: Mapped[int] = mapped_column(Integer, nullable=False)
    round_id: Mapped[int] = mapped_column(ForeignKey("rounds.id"), nullable=False)
    formation: Mapped[str] = mapped_column(String(16), nullable=False)
    slots: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    finalized: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("user_id", "league_id", "round_id", name="uq_squad_owner_round"),
    )


class RosterLinkRow(Base):
    """A chosen player in a finalized squad."""

    __tablename__ = "squad_players"

    squad_id: Mapped[int] = mapped_column(ForeignKey("squads.id"), primary_key=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"), primary_key=True)


class RoundPointsRow(Base):
    """Fantasy points earned by a player in a round."""

    __tablename__ = "round_points"

    round_id: Mapped[int] = mapped_column(ForeignKey("rounds.id"), primary_key=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"), primary_key=True)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
