"""Shared fixtures for database-backed tests."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from src.models import Player, Position, Round
from src.storage import DatabaseManager, PlayerRepository, RoundRepository


ROUND_ONE_START = datetime(2030, 1, 4, 18, 0, tzinfo=timezone.utc)
ROUND_TWO_START = ROUND_ONE_START + timedelta(days=7)


def make_players(
    position: Position, count: int, start_id: int, team_id: int = 1
) -> list[Player]:
    """Build count players at a position with ratings cycling 1-5."""
    return [
        Player(
            id=start_id + i,
            name=f"{position.name.title()} {i}",
            position=position,
            team_id=team_id,
            star_rating=(i % 5) + 1,
        )
        for i in range(count)
    ]


def make_directory(per_position: int = 20) -> list[Player]:
    """Directory with per_position players at every position.

    Ids are 1000+ for goalkeepers, 2000+ defenders, 3000+ midfielders
    and 4000+ forwards.
    """
    players: list[Player] = []
    for offset, position in enumerate(Position, start=1):
        players.extend(make_players(position, per_position, start_id=offset * 1000))
    return players


@pytest.fixture
def rounds() -> list[Round]:
    """Two upcoming rounds; the first is current."""
    return [
        Round(
            id=101,
            name="1",
            season_id=2030,
            starting_at=ROUND_ONE_START,
            ending_at=ROUND_ONE_START + timedelta(days=3),
            is_current=True,
        ),
        Round(
            id=102,
            name="2",
            season_id=2030,
            starting_at=ROUND_TWO_START,
            ending_at=ROUND_TWO_START + timedelta(days=3),
        ),
    ]


@pytest_asyncio.fixture
async def db(tmp_path):
    """Empty file-backed SQLite database with every table created."""
    manager = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await manager.init()
    await manager.create_all()
    yield manager
    await manager.dispose()


@pytest_asyncio.fixture
async def seeded_db(db: DatabaseManager, rounds: list[Round]):
    """Database holding a full player directory and two rounds."""
    async with db.session() as session:
        await PlayerRepository(session).upsert_many(make_directory())
        await RoundRepository(session).upsert_many(rounds)
    return db
