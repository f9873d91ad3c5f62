"""Match-data provider clients."""

from .base import (
    BaseClient,
    FetchError,
    ParseError,
    ProviderError,
    RateLimitError,
)
from .players_csv import load_players_from_csv, parse_position
from .sportmonks import SportmonksClient, parse_sportmonks_datetime
from .async_adapter import AsyncMatchDataProvider

__all__ = [
    # Base
    "BaseClient",
    "FetchError",
    "ParseError",
    "ProviderError",
    "RateLimitError",
    # CSV import
    "load_players_from_csv",
    "parse_position",
    # Sportmonks
    "SportmonksClient",
    "parse_sportmonks_datetime",
    # Async
    "AsyncMatchDataProvider",
]
