"""Fixture and round scoring from provider lineups, events and statistics."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from ..errors import NotFoundError, UpstreamUnavailable
from ..models import (
    EventType,
    FixtureEvent,
    FixtureList,
    FixtureStatistic,
    LineupEntry,
    Player,
    PlayerScore,
    Position,
    StatType,
)
from ..storage import DatabaseManager, PlayerRepository, RoundPointsRepository, RoundRepository
from .rules import (
    POINTS_ASSIST,
    POINTS_GOAL,
    POINTS_STARTER,
    Tiers,
    event_points,
    settle_stat_points,
    stat_points,
)

logger = logging.getLogger(__name__)

DEFAULT_POSITION = Position.MIDFIELD


class MatchDataProvider(Protocol):
    """Awaitable source of round and fixture data."""

    async def get_fixtures_for_round(self, round_id: int) -> FixtureList: ...

    async def get_lineups(self, fixture_id: int) -> list[LineupEntry]: ...

    async def get_events(self, fixture_id: int) -> list[FixtureEvent]: ...

    async def get_statistics(self, fixture_id: int) -> list[FixtureStatistic]: ...


@dataclass
class _Tally:
    """Working totals for one player in one fixture."""

    player_id: int
    name: str
    team_id: Optional[int]
    position: Position
    points: int = 0
    stat_points: int = 0
    started: bool = False
    played: bool = False


def _resolve_player(
    tallies: dict[int, _Tally],
    player_id: Optional[int],
    name: str,
    team_id: Optional[int],
) -> Optional[_Tally]:
    """
    Find the tally an event refers to.

    An explicit id wins and creates a midfield tally when the player is not
    in the lineup. Without an id the name is matched against the tallies.
    """
    if player_id is not None:
        tally = tallies.get(player_id)
        if tally is None:
            tally = _Tally(player_id, name, team_id, DEFAULT_POSITION)
            tallies[player_id] = tally
        return tally
    wanted = name.strip().casefold()
    if not wanted:
        return None
    for tally in tallies.values():
        if tally.name.strip().casefold() == wanted:
            return tally
    return None


def _apply_event(tallies: dict[int, _Tally], event: FixtureEvent) -> None:
    event_type = event.event_type
    if event_type is None:
        return

    if event_type == EventType.GOAL:
        scorer = _resolve_player(tallies, event.player_id, event.player_name, event.team_id)
        if scorer is not None:
            scorer.points += POINTS_GOAL
        if event.related_player_id is not None or event.related_player_name:
            assister = _resolve_player(
                tallies, event.related_player_id, event.related_player_name, event.team_id
            )
            if assister is not None:
                assister.points += POINTS_ASSIST
        return

    if event_type == EventType.SUBSTITUTION:
        entering = _resolve_player(tallies, event.player_id, event.player_name, event.team_id)
        if entering is not None:
            entering.played = True
        return

    points = event_points(event_type)
    if points:
        player = _resolve_player(tallies, event.player_id, event.player_name, event.team_id)
        if player is None:
            logger.debug("Skipping %s event with no resolvable player", event_type.name)
            return
        player.points += points


def compute_fixture_scores(
    lineups: list[LineupEntry],
    events: list[FixtureEvent],
    statistics: list[FixtureStatistic],
    directory: list[Player],
    tiers: Optional[dict[tuple[StatType, Position], Tiers]] = None,
) -> list[PlayerScore]:
    """
    Score one fixture.

    Starters get the appearance bonus, events add or remove points, team
    statistics are applied to every player of the team through the tier
    table, then stat points are settled (full for starters, half for
    substitutes) and anyone who never played ends at 0. Directory players
    missing from the fixture are appended with 0 points.

    Args:
        lineups: Starters and bench.
        events: Match events in order.
        statistics: Team-level statistics.
        directory: Every player known to the platform.
        tiers: Statistic tier table; defaults to STAT_TIERS.

    Returns:
        One PlayerScore per fixture player, then per remaining directory player.
    """
    known = {player.id: player for player in directory}
    tallies: dict[int, _Tally] = {}

    for entry in lineups:
        player = known.get(entry.player_id)
        position = entry.position or (player.position if player else DEFAULT_POSITION)
        name = entry.player_name or (player.name if player else "")
        tallies[entry.player_id] = _Tally(
            player_id=entry.player_id,
            name=name,
            team_id=entry.team_id,
            position=position,
            points=POINTS_STARTER if entry.is_starter else 0,
            started=entry.is_starter,
            played=entry.is_starter,
        )

    for event in events:
        _apply_event(tallies, event)

    # Statistics are team-level, so each one counts for every player of the team
    for statistic in statistics:
        for tally in tallies.values():
            if tally.team_id == statistic.team_id:
                tally.stat_points += stat_points(
                    statistic.type_code, tally.position, statistic.value, tiers
                )

    results = []
    for tally in tallies.values():
        if tally.played:
            points = tally.points + settle_stat_points(tally.stat_points, tally.started)
        else:
            points = 0
        results.append(PlayerScore(tally.player_id, points, tally.name))

    for player in directory:
        if player.id not in tallies:
            results.append(PlayerScore(player.id, 0, player.name))

    return results


class ScoringEngine:
    """
    Scores fixtures and rounds against the player directory.

    Fixtures of a round are scored concurrently and merged once all of them
    have completed, so the per-player sum is only touched from one task.
    Code that moves scoring onto OS threads must lock that merge.
    """

    def __init__(
        self,
        provider: MatchDataProvider,
        db: DatabaseManager,
        tiers: Optional[dict[tuple[StatType, Position], Tiers]] = None,
    ) -> None:
        self.provider = provider
        self.db = db
        self.tiers = tiers

    async def _load_directory(self) -> list[Player]:
        async with self.db.session() as session:
            return await PlayerRepository(session).list_all()

    async def score_fixture(
        self, fixture_id: int, directory: Optional[list[Player]] = None
    ) -> list[PlayerScore]:
        """
        Score one fixture.

        Raises:
            UpstreamUnavailable: If any of the fixture's data cannot be fetched.
        """
        if directory is None:
            directory = await self._load_directory()
        lineups, events, statistics = await asyncio.gather(
            self.provider.get_lineups(fixture_id),
            self.provider.get_events(fixture_id),
            self.provider.get_statistics(fixture_id),
        )
        return compute_fixture_scores(lineups, events, statistics, directory, self.tiers)

    async def score_round(self, round_id: int) -> list[PlayerScore]:
        """
        Sum fixture scores for every fixture in a round.

        A round whose fixture list cannot be fetched, or that has no
        fixtures, scores as an empty list. A failure while scoring any
        single fixture aborts the whole round.

        Raises:
            UpstreamUnavailable: If a fixture's data cannot be fetched.
        """
        try:
            fixture_list = await self.provider.get_fixtures_for_round(round_id)
        except UpstreamUnavailable as e:
            logger.warning("Could not fetch fixtures for round %s: %s", round_id, e)
            return []

        if not fixture_list.fixture_ids:
            logger.warning("Round %s has no fixtures to score", round_id)
            return []

        directory = await self._load_directory()
        per_fixture = await asyncio.gather(
            *(self.score_fixture(fixture_id, directory) for fixture_id in fixture_list.fixture_ids)
        )

        totals: dict[int, PlayerScore] = {}
        for scores in per_fixture:
            for score in scores:
                total = totals.setdefault(
                    score.player_id, PlayerScore(score.player_id, 0, score.player_name)
                )
                total.points += score.points
                if not total.player_name:
                    total.player_name = score.player_name

        logger.info(
            "Scored round %s: %d fixtures, %d players",
            round_id,
            len(fixture_list.fixture_ids),
            len(totals),
        )
        return list(totals.values())

    async def publish_round_points(self, round_id: int) -> list[PlayerScore]:
        """
        Score a round and store the points of directory players.

        Stored rows are upserted per (round, player) and each player's
        cumulative points are recomputed from their stored rounds, so
        publishing the same round again gives the same totals.

        Raises:
            NotFoundError: If the round is not stored.
            UpstreamUnavailable: If a fixture's data cannot be fetched.
        """
        async with self.db.session() as session:
            if await RoundRepository(session).get(round_id) is None:
                raise NotFoundError(f"Round {round_id} not found")

        scores = await self.score_round(round_id)

        async with self.db.session() as session:
            players = PlayerRepository(session)
            known = {player.id for player in await players.list_all()}
            kept = [score for score in scores if score.player_id in known]
            await RoundPointsRepository(session).upsert(round_id, kept)
            await players.refresh_cumulative_points(score.player_id for score in kept)

        logger.info("Published %d player scores for round %s", len(kept), round_id)
        return kept
