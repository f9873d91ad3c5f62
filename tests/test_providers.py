"""Tests for provider clients and the player CSV import."""

import asyncio
import json
import time
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from src.errors import UpstreamUnavailable
from src.models import EventType, Position, Round
from src.providers import (
    AsyncMatchDataProvider,
    BaseClient,
    FetchError,
    ParseError,
    RateLimitError,
    SportmonksClient,
    load_players_from_csv,
    parse_position,
    parse_sportmonks_datetime,
)


class TestParsePosition:
    """Tests for parse_position function."""

    def test_full_names(self) -> None:
        """Test parsing English position names."""
        assert parse_position("Goalkeeper") == Position.GOALKEEPER
        assert parse_position("Defender") == Position.DEFENSE
        assert parse_position("Midfielder") == Position.MIDFIELD
        assert parse_position("Forward") == Position.FORWARD

    def test_abbreviations(self) -> None:
        """Test parsing position abbreviations."""
        assert parse_position("GK") == Position.GOALKEEPER
        assert parse_position("df") == Position.DEFENSE
        assert parse_position("MF") == Position.MIDFIELD
        assert parse_position("FW") == Position.FORWARD

    def test_spanish_names(self) -> None:
        """Test parsing Spanish position names."""
        assert parse_position("Portero") == Position.GOALKEEPER
        assert parse_position("Delantero") == Position.FORWARD

    def test_provider_codes(self) -> None:
        """Test parsing numeric provider codes."""
        assert parse_position("24") == Position.GOALKEEPER
        assert parse_position(" 27 ") == Position.FORWARD

    def test_unknown_position_raises_error(self) -> None:
        """Test that unknown position raises ParseError."""
        with pytest.raises(ParseError, match="Unknown position"):
            parse_position("Libero")
        with pytest.raises(ParseError, match="Unknown position"):
            parse_position("31")


class TestLoadPlayersFromCsv:
    """Tests for load_players_from_csv function."""

    def test_loads_valid_rows(self, tmp_path: Path) -> None:
        """Test loading a well-formed file."""
        csv_path = tmp_path / "players.csv"
        csv_path.write_text(
            "id,name,position,team_id,star_rating\n"
            "1,Unai Simon,GK,13,4\n"
            "2,Pedri,Midfielder,83,5\n"
            "3,Unrated,FW,,\n"
        )

        players = load_players_from_csv(csv_path)

        assert [p.id for p in players] == [1, 2, 3]
        assert players[0].position == Position.GOALKEEPER
        assert players[0].team_id == 13
        assert players[1].star_rating == 5
        assert players[2].team_id is None
        assert players[2].star_rating == 3

    def test_skips_bad_rows(self, tmp_path: Path, caplog) -> None:
        """Test that unparseable rows are skipped with a warning."""
        csv_path = tmp_path / "players.csv"
        csv_path.write_text(
            "id,name,position,team_id,star_rating\n"
            "x,Bad Id,GK,1,3\n"
            "2,Bad Position,Sweeper,1,3\n"
            "3,Bad Rating,MF,1,9\n"
            "4,Good,DF,1,2\n"
        )

        players = load_players_from_csv(csv_path)

        assert [p.id for p in players] == [4]
        assert "line 2" in caplog.text
        assert "line 4" in caplog.text

    def test_first_duplicate_wins(self, tmp_path: Path) -> None:
        """Test that repeated ids keep the first row."""
        csv_path = tmp_path / "players.csv"
        csv_path.write_text(
            "id,name,position\n"
            "1,First,GK\n"
            "1,Second,FW\n"
        )

        players = load_players_from_csv(csv_path)

        assert len(players) == 1
        assert players[0].name == "First"


class DummyClient(BaseClient):
    """Concrete client with a secret parameter."""

    secret_params = ("token",)


class TestBaseClient:
    """Tests for BaseClient caching and error mapping."""

    def test_cache_key_ignores_secrets(self, tmp_path: Path) -> None:
        """Test that secret parameters do not change the cache key."""
        client = DummyClient(cache_dir=tmp_path)
        key1 = client._cache_key("https://example.com/a", {"token": "one", "page": 1})
        key2 = client._cache_key("https://example.com/a", {"token": "two", "page": 1})
        key3 = client._cache_key("https://example.com/a", {"token": "one", "page": 2})

        assert key1 == key2
        assert key1 != key3

    def test_cache_write_and_read(self, tmp_path: Path) -> None:
        """Test writing and reading from cache."""
        client = DummyClient(cache_dir=tmp_path)
        key = client._cache_key("https://example.com/a")

        client._write_cache(key, "https://example.com/a", {"data": [1, 2]})

        assert client._read_cache(key) == {"data": [1, 2]}

    def test_cache_expiry(self, tmp_path: Path) -> None:
        """Test that expired cache entries are not returned."""
        client = DummyClient(cache_dir=tmp_path, cache_ttl_hours=1)
        key = client._cache_key("https://example.com/a")
        entry = {
            "url": "https://example.com/a",
            "fetched_at": time.time() - 2 * 3600,
            "payload": {"data": []},
        }
        client._cache_path(key).write_text(json.dumps(entry))

        assert client._read_cache(key) is None

    def test_corrupt_cache_entry_removed(self, tmp_path: Path) -> None:
        """Test that unreadable cache files are deleted."""
        client = DummyClient(cache_dir=tmp_path)
        key = client._cache_key("https://example.com/a")
        client._cache_path(key).write_text("{not json")

        assert client._read_cache(key) is None
        assert not client._cache_path(key).exists()

    def test_clear_cache(self, tmp_path: Path) -> None:
        """Test clearing cache entries while leaving other files."""
        client = DummyClient(cache_dir=tmp_path)
        for url in ("https://example.com/1", "https://example.com/2"):
            client._write_cache(client._cache_key(url), url, {"data": url})
        (tmp_path / "notes.json").write_text('{"other": true}')

        assert client.clear_cache() == 2
        assert (tmp_path / "notes.json").exists()

    def test_fetch_json_uses_cache(self, tmp_path: Path) -> None:
        """Test that a second fetch is served from cache."""
        client = DummyClient(cache_dir=tmp_path)
        response = MagicMock(status_code=200)
        response.json.return_value = {"data": {"id": 1}}

        with patch.object(client._session, "get", return_value=response) as mock_get:
            first = client.fetch_json("https://example.com/a", {"token": "t"})
            second = client.fetch_json("https://example.com/a", {"token": "t"})

        assert first == second == {"data": {"id": 1}}
        mock_get.assert_called_once()

    def test_fetch_json_timeout(self, tmp_path: Path) -> None:
        """Test that timeouts become FetchError."""
        client = DummyClient(cache_dir=tmp_path)
        with patch.object(
            client._session, "get", side_effect=requests.exceptions.Timeout()
        ):
            with pytest.raises(FetchError, match="Timed out"):
                client.fetch_json("https://example.com/a", use_cache=False)

    def test_fetch_json_rate_limited(self, tmp_path: Path) -> None:
        """Test that 429 responses become RateLimitError."""
        client = DummyClient(cache_dir=tmp_path)
        response = MagicMock(status_code=429)
        with patch.object(client._session, "get", return_value=response):
            with pytest.raises(RateLimitError):
                client.fetch_json("https://example.com/a", use_cache=False)

    def test_fetch_json_http_error(self, tmp_path: Path) -> None:
        """Test that other HTTP errors become FetchError."""
        client = DummyClient(cache_dir=tmp_path)
        response = MagicMock(status_code=503)
        with patch.object(client._session, "get", return_value=response):
            with pytest.raises(FetchError, match="HTTP error 503"):
                client.fetch_json("https://example.com/a", use_cache=False)

    def test_fetch_json_invalid_body(self, tmp_path: Path) -> None:
        """Test that non-JSON bodies become ParseError."""
        client = DummyClient(cache_dir=tmp_path)
        response = MagicMock(status_code=200)
        response.json.side_effect = ValueError("Expecting value")
        with patch.object(client._session, "get", return_value=response):
            with pytest.raises(ParseError, match="Invalid JSON"):
                client.fetch_json("https://example.com/a", use_cache=False)

    def test_provider_errors_are_upstream_unavailable(self) -> None:
        """Test that provider errors share the upstream error type."""
        assert issubclass(FetchError, UpstreamUnavailable)
        assert issubclass(ParseError, UpstreamUnavailable)


class TestParseSportmonksDatetime:
    """Tests for parse_sportmonks_datetime function."""

    def test_naive_timestamp_is_utc(self) -> None:
        """Test provider timestamps without an offset."""
        parsed = parse_sportmonks_datetime("2025-08-15 19:00:00")
        assert parsed == datetime(2025, 8, 15, 19, 0, tzinfo=timezone.utc)

    def test_bare_date(self) -> None:
        """Test provider dates without a time."""
        assert parse_sportmonks_datetime("2025-08-15") == datetime(
            2025, 8, 15, tzinfo=timezone.utc
        )

    def test_empty_value(self) -> None:
        """Test missing timestamps."""
        assert parse_sportmonks_datetime(None) is None
        assert parse_sportmonks_datetime("") is None

    def test_invalid_value(self) -> None:
        """Test unparseable timestamps."""
        with pytest.raises(ParseError, match="Invalid timestamp"):
            parse_sportmonks_datetime("soon")


class TestSportmonksClient:
    """Tests for SportmonksClient response parsing."""

    @pytest.fixture
    def client(self, tmp_path: Path) -> SportmonksClient:
        """Create a client with a throwaway cache."""
        return SportmonksClient(
            api_token="secret",
            base_url="https://api.example.com/v3/football/",
            league_id=564,
            cache_dir=tmp_path,
        )

    @patch("src.providers.base.BaseClient.fetch_json")
    def test_fixtures_for_round(self, mock_fetch: MagicMock, client: SportmonksClient) -> None:
        """Test fixture ids and matchday from a round payload."""
        mock_fetch.return_value = {
            "data": {"id": 101, "name": "3", "fixtures": [{"id": 11}, {"id": 12}]}
        }

        fixture_list = client.get_fixtures_for_round(101)

        assert fixture_list.fixture_ids == [11, 12]
        assert fixture_list.matchday == 3
        url = mock_fetch.call_args.args[0]
        params = mock_fetch.call_args.kwargs["params"]
        assert url == "https://api.example.com/v3/football/rounds/101"
        assert params == {"api_token": "secret", "include": "fixtures"}

    @patch("src.providers.base.BaseClient.fetch_json")
    def test_round_without_fixtures(self, mock_fetch: MagicMock, client: SportmonksClient) -> None:
        """Test a round with no fixtures attached."""
        mock_fetch.return_value = {"data": {"id": 101, "name": "Playoff"}}

        fixture_list = client.get_fixtures_for_round(101)

        assert fixture_list.fixture_ids == []
        assert fixture_list.matchday is None

    @patch("src.providers.base.BaseClient.fetch_json")
    def test_missing_data_member(self, mock_fetch: MagicMock, client: SportmonksClient) -> None:
        """Test that error payloads raise ParseError."""
        mock_fetch.return_value = {"message": "Unauthenticated"}
        with pytest.raises(ParseError, match="no data member"):
            client.get_fixtures_for_round(101)

    @patch("src.providers.base.BaseClient.fetch_json")
    def test_lineups(self, mock_fetch: MagicMock, client: SportmonksClient) -> None:
        """Test lineup parsing with starters, bench and bad rows."""
        mock_fetch.return_value = {
            "data": {
                "id": 11,
                "lineups": [
                    {"player_id": 1, "team_id": 10, "type_id": 11, "position_id": 27,
                     "player_name": "Striker"},
                    {"player_id": 2, "team_id": 10, "type_id": 12, "position_id": None},
                    {"player_id": 3, "team_id": 10, "type_id": 11, "position_id": 151},
                    {"team_id": 10, "type_id": 11},
                ],
            }
        }

        lineups = client.get_lineups(11)

        assert [entry.player_id for entry in lineups] == [1, 2, 3]
        assert lineups[0].is_starter is True
        assert lineups[0].position == Position.FORWARD
        assert lineups[0].player_name == "Striker"
        assert lineups[1].is_starter is False
        assert lineups[1].position is None
        assert lineups[2].position == Position.MIDFIELD

    @patch("src.providers.base.BaseClient.fetch_json")
    def test_events(self, mock_fetch: MagicMock, client: SportmonksClient) -> None:
        """Test event parsing."""
        mock_fetch.return_value = {
            "data": {
                "events": [
                    {"type_id": 14, "participant_id": 10, "player_id": 1,
                     "related_player_id": 2, "player_name": "Striker"},
                    {"type_id": 19, "participant_id": 20, "player_id": None,
                     "player_name": "Keeper"},
                    {"participant_id": 20},
                ]
            }
        }

        events = client.get_events(11)

        assert len(events) == 2
        assert events[0].event_type == EventType.GOAL
        assert events[0].team_id == 10
        assert events[0].related_player_id == 2
        assert events[1].player_id is None
        assert events[1].player_name == "Keeper"

    @patch("src.providers.base.BaseClient.fetch_json")
    def test_statistics(self, mock_fetch: MagicMock, client: SportmonksClient) -> None:
        """Test statistic parsing skips rows without a value."""
        mock_fetch.return_value = {
            "data": {
                "statistics": [
                    {"type_id": 86, "participant_id": 10, "data": {"value": 5}},
                    {"type_id": 1605, "participant_id": 10, "data": {"value": "87.5"}},
                    {"type_id": 57, "participant_id": 20, "data": {}},
                    {"type_id": 57, "data": {"value": 3}},
                ]
            }
        }

        statistics = client.get_statistics(11)

        assert [(s.type_code, s.team_id, s.value) for s in statistics] == [
            (86, 10, 5.0),
            (1605, 10, 87.5),
        ]

    @patch("src.providers.base.BaseClient.fetch_json")
    def test_current_season(self, mock_fetch: MagicMock, client: SportmonksClient) -> None:
        """Test reading the league's current season."""
        mock_fetch.return_value = {"data": {"id": 564, "currentseason": {"id": 23621}}}
        assert client.get_current_season_id() == 23621

        mock_fetch.return_value = {"data": {"id": 564}}
        assert client.get_current_season_id() is None

    @patch("src.providers.base.BaseClient.fetch_json")
    def test_rounds_follow_pagination(
        self, mock_fetch: MagicMock, client: SportmonksClient
    ) -> None:
        """Test that every page of rounds is read."""
        mock_fetch.side_effect = [
            {
                "data": [
                    {"id": 1, "name": "1", "season_id": 9, "starting_at": "2025-08-15",
                     "ending_at": "2025-08-18", "is_current": False},
                    {"id": 2, "name": "2", "season_id": 9, "starting_at": "bad"},
                ],
                "pagination": {"has_more": True},
            },
            {
                "data": [
                    {"id": 3, "name": "3", "season_id": 9,
                     "starting_at": "2025-08-29 19:00:00", "is_current": True},
                ],
                "pagination": {"has_more": False},
            },
        ]

        rounds = client.get_rounds_for_season(9)

        assert [r.id for r in rounds] == [1, 3]
        assert rounds[0].starting_at == datetime(2025, 8, 15, tzinfo=timezone.utc)
        assert rounds[1].is_current is True
        assert [call.kwargs["params"]["page"] for call in mock_fetch.call_args_list] == [1, 2]


class SlowClient:
    """Blocking client stand-in."""

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay

    def get_lineups(self, fixture_id: int) -> list:
        time.sleep(self.delay)
        return [fixture_id]

    def get_rounds_for_season(self, season_id: int) -> list[Round]:
        time.sleep(self.delay)
        return [Round(id=1, name="1", season_id=season_id)]


class TestAsyncMatchDataProvider:
    """Tests for AsyncMatchDataProvider."""

    @pytest.mark.asyncio
    async def test_passes_results_through(self) -> None:
        """Test that results of the blocking client are returned."""
        provider = AsyncMatchDataProvider(SlowClient(), timeout=5)
        assert await provider.get_lineups(11) == [11]
        rounds = await provider.get_rounds_for_season(9)
        assert rounds[0].season_id == 9

    @pytest.mark.asyncio
    async def test_timeout_is_upstream_unavailable(self) -> None:
        """Test that a slow call surfaces as UpstreamUnavailable."""
        provider = AsyncMatchDataProvider(SlowClient(delay=0.5), timeout=0.05)
        with pytest.raises(UpstreamUnavailable, match="timed out"):
            await provider.get_lineups(11)

    @pytest.mark.asyncio
    async def test_client_errors_propagate(self) -> None:
        """Test that provider errors are not swallowed."""
        client = SlowClient()
        client.get_lineups = MagicMock(side_effect=FetchError("boom"))
        provider = AsyncMatchDataProvider(client, timeout=5)
        with pytest.raises(FetchError, match="boom"):
            await provider.get_lineups(11)

    @pytest.mark.asyncio
    async def test_fixtures_fetched_concurrently(self) -> None:
        """Test that calls run in worker threads without blocking each other."""
        provider = AsyncMatchDataProvider(SlowClient(delay=0.2), timeout=5)
        started = time.monotonic()
        results = await asyncio.gather(*(provider.get_lineups(i) for i in range(4)))
        assert results == [[0], [1], [2], [3]]
        assert time.monotonic() - started < 0.6
