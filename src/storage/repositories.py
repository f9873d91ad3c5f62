"""Repositories over the async session. None of them commit."""

from typing import Iterable, Optional

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ConflictError
from ..models import (
    CandidateSlot,
    FinalizedSquad,
    Player,
    PlayerScore,
    Position,
    Round,
    SquadStatus,
    TemporarySquad,
    slots_from_json,
    slots_to_json,
)
from .tables import PlayerRow, RoundPointsRow, RoundRow, RosterLinkRow, SquadRow


def _insert_for(session: AsyncSession):
    """Return the dialect insert construct that supports ON CONFLICT."""
    if session.bind.dialect.name == "postgresql":
        return postgresql.insert
    return sqlite.insert


def player_from_row(row: PlayerRow) -> Player:
    """Convert a directory row to a Player."""
    return Player(
        id=row.id,
        name=row.name,
        position=Position.from_code(row.position_id),
        team_id=row.team_id,
        star_rating=row.star_rating,
        points=row.points,
    )


def round_from_row(row: RoundRow) -> Round:
    """Convert a round row to a Round."""
    return Round(
        id=row.id,
        name=row.name,
        season_id=row.season_id,
        starting_at=row.starting_at,
        ending_at=row.ending_at,
        is_current=row.is_current,
    )


class PlayerRepository:
    """Player directory access."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_all(self) -> list[Player]:
        """Return every player in the directory ordered by id."""
        result = await self.session.execute(select(PlayerRow).order_by(PlayerRow.id))
        return [player_from_row(row) for row in result.scalars().all()]

    async def list_by_position(
        self, position: Position, exclude_ids: Iterable[int] = ()
    ) -> list[Player]:
        """Return players at a position, skipping excluded ids."""
        stmt = (
            select(PlayerRow)
            .where(PlayerRow.position_id == position.value)
            .order_by(PlayerRow.id)
        )
        excluded = list(exclude_ids)
        if excluded:
            stmt = stmt.where(PlayerRow.id.not_in(excluded))
        result = await self.session.execute(stmt)
        return [player_from_row(row) for row in result.scalars().all()]

    async def upsert_many(self, players: Iterable[Player]) -> None:
        """Insert players or update their name, team, position and rating."""
        rows = [
            {
                "id": p.id,
                "name": p.name,
                "team_id": p.team_id,
                "position_id": p.position.value,
                "star_rating": p.star_rating,
                "points": p.points,
            }
            for p in players
        ]
        if not rows:
            return
        insert = _insert_for(self.session)
        stmt = insert(PlayerRow).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=[PlayerRow.id],
            set_={
                "name": stmt.excluded.name,
                "team_id": stmt.excluded.team_id,
                "position_id": stmt.excluded.position_id,
                "star_rating": stmt.excluded.star_rating,
            },
        )
        await self.session.execute(stmt)

    async def refresh_cumulative_points(self, player_ids: Iterable[int]) -> None:
        """Set each player's cumulative points to the sum of their round points."""
        ids = list(player_ids)
        if not ids:
            return
        total = (
            select(func.coalesce(func.sum(RoundPointsRow.points), 0))
            .where(RoundPointsRow.player_id == PlayerRow.id)
            .scalar_subquery()
        )
        await self.session.execute(
            update(PlayerRow).where(PlayerRow.id.in_(ids)).values(points=total)
        )


class RoundRepository:
    """Round calendar access."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, round_id: int) -> Optional[Round]:
        """Get a round by provider id."""
        row = await self.session.get(RoundRow, round_id)
        return round_from_row(row) if row is not None else None

    async def get_by_name(self, name: str) -> Optional[Round]:
        """Get a round by display name, preferring the latest season."""
        stmt = (
            select(RoundRow)
            .where(RoundRow.name == name)
            .order_by(RoundRow.season_id.desc(), RoundRow.id.desc())
            .limit(1)
        )
        row = (await self.session.execute(stmt)).scalars().first()
        return round_from_row(row) if row is not None else None

    async def get_current(self) -> Optional[Round]:
        """Get the round flagged as current."""
        stmt = select(RoundRow).where(RoundRow.is_current.is_(True)).limit(1)
        row = (await self.session.execute(stmt)).scalars().first()
        return round_from_row(row) if row is not None else None

    async def upsert_many(self, rounds: Iterable[Round]) -> None:
        """Insert rounds or refresh their name, dates and current flag."""
        rows = [
            {
                "id": r.id,
                "name": r.name,
                "season_id": r.season_id,
                "starting_at": r.starting_at,
                "ending_at": r.ending_at,
                "is_current": r.is_current,
            }
            for r in rounds
        ]
        if not rows:
            return
        insert = _insert_for(self.session)
        stmt = insert(RoundRow).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=[RoundRow.id],
            set_={
                "name": stmt.excluded.name,
                "season_id": stmt.excluded.season_id,
                "starting_at": stmt.excluded.starting_at,
                "ending_at": stmt.excluded.ending_at,
                "is_current": stmt.excluded.is_current,
            },
        )
        await self.session.execute(stmt)

    async def set_current(self, round_id: int) -> None:
        """Flag one round as current and clear the flag everywhere else."""
        await self.session.execute(
            update(RoundRow).where(RoundRow.id != round_id).values(is_current=False)
        )
        await self.session.execute(
            update(RoundRow).where(RoundRow.id == round_id).values(is_current=True)
        )

    async def clear_current(self) -> None:
        """Clear the current flag on every stored round."""
        await self.session.execute(update(RoundRow).values(is_current=False))


class SquadRepository:
    """Squad and roster link access."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self, user_id: int, league_id: int, round_id: int, formation: str
    ) -> SquadRow:
        """
        Insert an empty in-progress squad.

        Raises:
            ConflictError: If a squad already exists for (user, league, round).
        """
        row = SquadRow(
            user_id=user_id,
            league_id=league_id,
            round_id=round_id,
            formation=formation,
            slots=[],
            finalized=False,
        )
        self.session.add(row)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise ConflictError(
                f"Draft already exists for user {user_id}, league {league_id}, "
                f"round {round_id}"
            ) from e
        return row

    async def get(self, squad_id: int) -> Optional[SquadRow]:
        """Get a squad row by id."""
        return await self.session.get(SquadRow, squad_id)

    async def find(
        self, user_id: int, league_id: int, round_id: int
    ) -> Optional[SquadRow]:
        """Get the squad row owned by (user, league, round)."""
        stmt = select(SquadRow).where(
            SquadRow.user_id == user_id,
            SquadRow.league_id == league_id,
            SquadRow.round_id == round_id,
        )
        return (await self.session.execute(stmt)).scalars().first()

    async def save_slots(self, row: SquadRow, slots: list[CandidateSlot]) -> None:
        """Replace the stored slot payload."""
        row.slots = slots_to_json(slots)
        await self.session.flush()

    async def add_roster_links(self, squad_id: int, player_ids: Iterable[int]) -> None:
        """Link chosen players to a squad; existing links are left untouched."""
        rows = [{"squad_id": squad_id, "player_id": pid} for pid in player_ids]
        if not rows:
            return
        insert = _insert_for(self.session)
        await self.session.execute(insert(RosterLinkRow).values(rows).on_conflict_do_nothing())

    async def mark_finalized(self, row: SquadRow) -> None:
        """Flag the squad as finalized."""
        row.finalized = True
        await self.session.flush()

    async def list_roster(self, squad_id: int) -> list[Player]:
        """Return the players linked to a squad."""
        stmt = (
            select(PlayerRow)
            .join(RosterLinkRow, RosterLinkRow.player_id == PlayerRow.id)
            .where(RosterLinkRow.squad_id == squad_id)
            .order_by(PlayerRow.id)
        )
        result = await self.session.execute(stmt)
        return [player_from_row(row) for row in result.scalars().all()]

    @staticmethod
    def to_temporary(row: SquadRow) -> TemporarySquad:
        """Convert a squad row to a TemporarySquad."""
        return TemporarySquad(
            id=row.id,
            user_id=row.user_id,
            league_id=row.league_id,
            round_id=row.round_id,
            formation=row.formation,
            slots=slots_from_json(row.slots),
            status=SquadStatus.FINALIZED if row.finalized else SquadStatus.IN_PROGRESS,
        )

    @staticmethod
    def to_finalized(row: SquadRow, players: list[Player]) -> FinalizedSquad:
        """Convert a finalized squad row and its roster to a FinalizedSquad."""
        return FinalizedSquad(
            id=row.id,
            user_id=row.user_id,
            league_id=row.league_id,
            round_id=row.round_id,
            formation=row.formation,
            players=players,
        )


class RoundPointsRepository:
    """Per-round player points access."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def upsert(self, round_id: int, scores: Iterable[PlayerScore]) -> None:
        """Insert or overwrite one points row per (round, player)."""
        rows = [
            {"round_id": round_id, "player_id": s.player_id, "points": s.points}
            for s in scores
        ]
        if not rows:
            return
        insert = _insert_for(self.session)
        stmt = insert(RoundPointsRow).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=[RoundPointsRow.round_id, RoundPointsRow.player_id],
            set_={"points": stmt.excluded.points},
        )
        await self.session.execute(stmt)

    async def list_for_round(self, round_id: int) -> dict[int, int]:
        """Return stored points for a round keyed by player id."""
        stmt = select(RoundPointsRow).where(RoundPointsRow.round_id == round_id)
        result = await self.session.execute(stmt)
        return {row.player_id: row.points for row in result.scalars().all()}
