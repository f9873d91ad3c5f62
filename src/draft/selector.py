"""Star-rating weighted candidate selection without replacement."""

import logging
import random
from typing import Optional, Protocol

from ..errors import InsufficientCandidatesError
from ..models import Player, Position

logger = logging.getLogger(__name__)


# Average players are favoured, extreme ratings are rarer but still drawable
STAR_WEIGHTS: dict[int, int] = {
    1: 1,
    2: 3,
    3: 4,
    4: 3,
    5: 1,
}
MISSING_RATING_WEIGHT = 4
UNKNOWN_RATING_WEIGHT = 1


class PlayerPool(Protocol):
    """Source of draftable players."""

    async def list_by_position(
        self, position: Position, exclude_ids: frozenset[int] = ...
    ) -> list[Player]: ...


def star_weight(star_rating: Optional[int]) -> int:
    """
    Selection weight for a star rating.

    Args:
        star_rating: Rating 1-5, or None when unrated.

    Returns:
        1 for ratings 1 and 5, 3 for 2 and 4, 4 for 3 or missing.
    """
    if star_rating is None:
        return MISSING_RATING_WEIGHT
    return STAR_WEIGHTS.get(star_rating, UNKNOWN_RATING_WEIGHT)


def weighted_sample(
    pool: list[Player],
    count: int,
    rng: random.Random,
) -> list[Player]:
    """
    Draw distinct players from a pool, weighted by star rating.

    Each draw picks a uniform value in [0, total weight) and walks the
    remaining candidates subtracting weights until the value is used up.
    If rounding leaves nothing picked, the last remaining candidate is used.

    Args:
        pool: Eligible players. Not modified.
        count: Number of players to draw.
        rng: Random source.

    Returns:
        The drawn players in draw order.

    Raises:
        InsufficientCandidatesError: If the pool has fewer than count players.
    """
    if len(pool) < count:
        raise InsufficientCandidatesError(
            f"Need {count} candidates but only {len(pool)} are available"
        )

    available = list(pool)
    selected: list[Player] = []
    for _ in range(count):
        total_weight = sum(star_weight(p.star_rating) for p in available)
        cursor = rng.random() * total_weight
        selected_index = -1
        for index, player in enumerate(available):
            cursor -= star_weight(player.star_rating)
            if cursor <= 0:
                selected_index = index
                break
        if selected_index == -1:
            selected_index = len(available) - 1
        selected.append(available.pop(selected_index))
    return selected


class WeightedCandidateSelector:
    """Draws candidates for one position from the player directory."""

    def __init__(self, players: PlayerPool, rng: Optional[random.Random] = None) -> None:
        """
        Args:
            players: Directory queried for eligible players on every draw.
            rng: Random source; a fresh unseeded one is used when omitted.
        """
        self.players = players
        self.rng = rng or random.Random()

    async def select_candidates(
        self,
        position: Position,
        count: int,
        excluded_ids: frozenset[int] = frozenset(),
    ) -> tuple[list[Player], frozenset[int]]:
        """
        Draw count distinct players at a position.

        Args:
            position: Position to draw from.
            count: Number of candidates.
            excluded_ids: Player ids already offered elsewhere in the squad.

        Returns:
            The drawn players and the exclusion set extended with their ids.

        Raises:
            InsufficientCandidatesError: If the eligible pool is too small.
        """
        pool = await self.players.list_by_position(position, excluded_ids)
        try:
            chosen = weighted_sample(pool, count, self.rng)
        except InsufficientCandidatesError as e:
            raise InsufficientCandidatesError(
                f"Not enough {position.name.lower()} players: {e}"
            ) from e
        return chosen, excluded_ids | {p.id for p in chosen}
