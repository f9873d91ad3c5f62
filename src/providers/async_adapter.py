"""Awaitable facade over the blocking provider client."""

import asyncio
import logging
from typing import Any, Callable, Optional, TypeVar

from ..config import PROVIDER_TIMEOUT_SECONDS
from ..errors import UpstreamUnavailable
from ..models import FixtureEvent, FixtureList, FixtureStatistic, LineupEntry, Round
from .sportmonks import SportmonksClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AsyncMatchDataProvider:
    """
    Runs SportmonksClient calls in worker threads with a caller timeout.

    Timeouts surface as UpstreamUnavailable. Nothing is retried here.
    """

    def __init__(
        self,
        client: SportmonksClient,
        timeout: float = PROVIDER_TIMEOUT_SECONDS,
    ) -> None:
        self.client = client
        self.timeout = timeout

    async def _call(self, func: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise UpstreamUnavailable(
                f"{func.__name__}{args} timed out after {self.timeout}s"
            ) from e

    async def get_fixtures_for_round(self, round_id: int) -> FixtureList:
        return await self._call(self.client.get_fixtures_for_round, round_id)

    async def get_lineups(self, fixture_id: int) -> list[LineupEntry]:
        return await self._call(self.client.get_lineups, fixture_id)

    async def get_events(self, fixture_id: int) -> list[FixtureEvent]:
        return await self._call(self.client.get_events, fixture_id)

    async def get_statistics(self, fixture_id: int) -> list[FixtureStatistic]:
        return await self._call(self.client.get_statistics, fixture_id)

    async def get_current_season_id(self) -> Optional[int]:
        return await self._call(self.client.get_current_season_id)

    async def get_rounds_for_season(self, season_id: int) -> list[Round]:
        return await self._call(self.client.get_rounds_for_season, season_id)
