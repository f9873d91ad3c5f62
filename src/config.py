"""Runtime configuration read from the environment."""

import logging
import os
from pathlib import Path


PROJECT_ROOT = Path(__file__).parent.parent

# Sportmonks football API
SPORTMONKS_API_BASE = os.getenv(
    "SPORTMONKS_API_BASE", "https://api.sportmonks.com/v3/football"
)
SPORTMONKS_API_TOKEN = os.getenv("SPORTMONKS_API_TOKEN", "")

# La Liga in Sportmonks
SPORTMONKS_LEAGUE_ID = int(os.getenv("SPORTMONKS_LEAGUE_ID", "564"))

# Seconds before a provider call is abandoned
PROVIDER_TIMEOUT_SECONDS = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "30"))

CACHE_DIR = Path(os.getenv("CACHE_DIR", str(PROJECT_ROOT / "data" / "cache")))

DATABASE_URL = os.getenv(
    "DATABASE_URL", f"sqlite+aiosqlite:///{PROJECT_ROOT / 'data' / 'fantasy.db'}"
)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def configure_logging(level: str | int | None = None) -> None:
    """
    Configure root logging for command-line use.

    Args:
        level: Logging level name or number. Defaults to LOG_LEVEL.
    """
    logging.basicConfig(
        level=level if level is not None else LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # HTTP client internals are noisy at debug level
    logging.getLogger("urllib3").setLevel(logging.WARNING)
