"""Sportmonks football API client."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..config import (
    PROVIDER_TIMEOUT_SECONDS,
    SPORTMONKS_API_BASE,
    SPORTMONKS_API_TOKEN,
    SPORTMONKS_LEAGUE_ID,
)
from ..models import (
    FixtureEvent,
    FixtureList,
    FixtureStatistic,
    LineupEntry,
    LineupType,
    Position,
    Round,
)
from .base import BaseClient, ParseError

logger = logging.getLogger(__name__)


def parse_sportmonks_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a Sportmonks timestamp into an aware UTC datetime.

    Sportmonks returns either "2025-08-15 19:00:00" or a bare date.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise ParseError(f"Invalid timestamp: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _optional_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


class SportmonksClient(BaseClient):
    """
    Client for the Sportmonks v3 football API.

    Fetches:
    - Round fixture lists
    - Fixture lineups, events and team statistics
    - Current season and its rounds
    """

    secret_params = ("api_token",)

    def __init__(
        self,
        api_token: str = SPORTMONKS_API_TOKEN,
        base_url: str = SPORTMONKS_API_BASE,
        league_id: int = SPORTMONKS_LEAGUE_ID,
        cache_dir: Optional[Path] = None,
        cache_ttl_hours: int = 1,
        timeout: float = PROVIDER_TIMEOUT_SECONDS,
    ) -> None:
        """
        Initialize the Sportmonks client.

        Args:
            api_token: Sportmonks API token.
            base_url: Football API base URL.
            league_id: League whose seasons and rounds are synced.
            cache_dir: Directory for caching responses.
            cache_ttl_hours: Cache time-to-live in hours.
            timeout: HTTP timeout in seconds.
        """
        super().__init__(
            cache_dir=cache_dir,
            cache_ttl_hours=cache_ttl_hours,
            min_interval=0.2,
            timeout=timeout,
        )
        self.api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.league_id = league_id

    def _get_data(
        self, path: str, use_cache: bool = True, **params: Any
    ) -> Any:
        """Fetch an endpoint and return its "data" member."""
        query = {"api_token": self.api_token, **params}
        payload = self.fetch_json(f"{self.base_url}/{path}", params=query, use_cache=use_cache)
        if not isinstance(payload, dict) or "data" not in payload:
            raise ParseError(f"Response for {path} has no data member")
        return payload["data"]

    def _get_fixture(self, fixture_id: int, include: str, use_cache: bool) -> dict:
        data = self._get_data(f"fixtures/{fixture_id}", use_cache=use_cache, include=include)
        if not isinstance(data, dict):
            raise ParseError(f"Fixture {fixture_id} payload is not an object")
        return data

    def get_fixtures_for_round(self, round_id: int, use_cache: bool = True) -> FixtureList:
        """
        Get the fixtures scheduled in a round.

        Args:
            round_id: Provider round id.
            use_cache: Whether to use cached data.

        Returns:
            FixtureList with fixture ids and the matchday number.
        """
        data = self._get_data(f"rounds/{round_id}", use_cache=use_cache, include="fixtures")
        try:
            fixture_ids = [int(f["id"]) for f in data.get("fixtures") or []]
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(f"Malformed fixtures for round {round_id}: {e}") from e
        name = str(data.get("name", ""))
        matchday = int(name) if name.strip().isdigit() else None
        return FixtureList(fixture_ids=fixture_ids, matchday=matchday)

    def get_lineups(self, fixture_id: int, use_cache: bool = True) -> list[LineupEntry]:
        """Get starters and bench players for a fixture."""
        data = self._get_fixture(fixture_id, "lineups", use_cache)
        lineups = []
        for entry in data.get("lineups") or []:
            position_id = entry.get("position_id")
            try:
                lineups.append(
                    LineupEntry(
                        player_id=int(entry["player_id"]),
                        team_id=int(entry["team_id"]),
                        is_starter=entry.get("type_id") == LineupType.STARTER.value,
                        player_name=entry.get("player_name") or "",
                        position=Position.from_code(position_id, default=Position.MIDFIELD)
                        if position_id is not None
                        else None,
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed lineup entry in fixture %s: %r", fixture_id, entry)
                continue
        return lineups

    def get_events(self, fixture_id: int, use_cache: bool = True) -> list[FixtureEvent]:
        """Get match events (goals, cards, substitutions...) for a fixture."""
        data = self._get_fixture(fixture_id, "events", use_cache)
        events = []
        for entry in data.get("events") or []:
            try:
                events.append(
                    FixtureEvent(
                        type_code=int(entry["type_id"]),
                        team_id=_optional_int(entry.get("participant_id")),
                        player_id=_optional_int(entry.get("player_id")),
                        related_player_id=_optional_int(entry.get("related_player_id")),
                        player_name=entry.get("player_name") or "",
                        related_player_name=entry.get("related_player_name") or "",
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed event in fixture %s: %r", fixture_id, entry)
                continue
        return events

    def get_statistics(
        self, fixture_id: int, use_cache: bool = True
    ) -> list[FixtureStatistic]:
        """Get team-level statistics for a fixture."""
        data = self._get_fixture(fixture_id, "statistics", use_cache)
        statistics = []
        for entry in data.get("statistics") or []:
            try:
                value = (entry.get("data") or {}).get("value")
                if value is None:
                    continue
                statistics.append(
                    FixtureStatistic(
                        type_code=int(entry["type_id"]),
                        team_id=int(entry["participant_id"]),
                        value=float(value),
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed statistic in fixture %s: %r", fixture_id, entry)
                continue
        return statistics

    def get_current_season_id(self, use_cache: bool = True) -> Optional[int]:
        """Get the id of the league's current season, if any."""
        data = self._get_data(
            f"leagues/{self.league_id}", use_cache=use_cache, include="currentSeason"
        )
        season = data.get("currentseason") or data.get("currentSeason") or {}
        return _optional_int(season.get("id"))

    def get_rounds_for_season(self, season_id: int, use_cache: bool = True) -> list[Round]:
        """
        Get every round of a season, following pagination.

        Args:
            season_id: Provider season id.
            use_cache: Whether to use cached data.

        Returns:
            List of Round objects in provider order.
        """
        rounds: list[Round] = []
        page = 1
        while True:
            query = {"api_token": self.api_token, "page": page}
            payload = self.fetch_json(
                f"{self.base_url}/rounds/seasons/{season_id}",
                params=query,
                use_cache=use_cache,
            )
            if not isinstance(payload, dict) or "data" not in payload:
                raise ParseError(f"Response for season {season_id} rounds has no data member")
            for entry in payload["data"] or []:
                try:
                    rounds.append(
                        Round(
                            id=int(entry["id"]),
                            name=str(entry.get("name", "")),
                            season_id=_optional_int(entry.get("season_id")),
                            starting_at=parse_sportmonks_datetime(entry.get("starting_at")),
                            ending_at=parse_sportmonks_datetime(entry.get("ending_at")),
                            is_current=bool(entry.get("is_current", False)),
                        )
                    )
                except (KeyError, TypeError, ValueError, ParseError):
                    logger.debug("Skipping malformed round in season %s: %r", season_id, entry)
                    continue
            if not (payload.get("pagination") or {}).get("has_more"):
                break
            page += 1
        return rounds
