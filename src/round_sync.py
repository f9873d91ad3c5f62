"""Keep the stored round calendar in line with the provider."""

import logging
from typing import Optional, Protocol

from .models import Round
from .storage import DatabaseManager, RoundRepository

logger = logging.getLogger(__name__)


class SeasonCalendar(Protocol):
    """Provider of seasons and their rounds."""

    async def get_current_season_id(self) -> Optional[int]: ...

    async def get_rounds_for_season(self, season_id: int) -> list[Round]: ...


async def sync_rounds(provider: SeasonCalendar, db: DatabaseManager) -> list[Round]:
    """
    Store every round of the current season and flag the current one.

    When the season has no current round yet, no stored round stays
    flagged, including rounds of earlier seasons.

    Args:
        provider: Season calendar source.
        db: Initialized database manager.

    Returns:
        The synced rounds; empty when the provider has no current season.

    Raises:
        UpstreamUnavailable: If the provider cannot be reached.
    """
    season_id = await provider.get_current_season_id()
    if season_id is None:
        logger.warning("Provider reports no current season; rounds not synced")
        return []

    rounds = await provider.get_rounds_for_season(season_id)
    if not rounds:
        logger.warning("No rounds found for season %s", season_id)
        return []

    async with db.session() as session:
        repo = RoundRepository(session)
        await repo.upsert_many(rounds)
        current = next((r for r in rounds if r.is_current), None)
        if current is not None:
            await repo.set_current(current.id)
        else:
            # Pre-season: no round of the synced season is live yet
            await repo.clear_current()

    logger.info(
        "Synced %d rounds for season %s (current: %s)",
        len(rounds),
        season_id,
        current.name if current else "none",
    )
    return rounds
