"""Player directory import from CSV."""

import csv
import logging
from pathlib import Path

from ..models import DEFAULT_STAR_RATING, Player, Position
from .base import ParseError

logger = logging.getLogger(__name__)


# Position names and abbreviations accepted in the CSV
POSITION_MAP: dict[str, Position] = {
    "goalkeeper": Position.GOALKEEPER,
    "gk": Position.GOALKEEPER,
    "portero": Position.GOALKEEPER,
    "defense": Position.DEFENSE,
    "defender": Position.DEFENSE,
    "df": Position.DEFENSE,
    "defensa": Position.DEFENSE,
    "midfield": Position.MIDFIELD,
    "midfielder": Position.MIDFIELD,
    "mf": Position.MIDFIELD,
    "centrocampista": Position.MIDFIELD,
    "forward": Position.FORWARD,
    "fw": Position.FORWARD,
    "delantero": Position.FORWARD,
}


def parse_position(position_str: str) -> Position:
    """
    Parse a position name, abbreviation or provider code.

    Args:
        position_str: e.g. "Goalkeeper", "MF" or "27".

    Returns:
        Position enum value.

    Raises:
        ParseError: If position cannot be parsed.
    """
    normalized = position_str.lower().strip()
    if normalized in POSITION_MAP:
        return POSITION_MAP[normalized]
    if normalized.isdigit():
        try:
            return Position.from_code(int(normalized))
        except ValueError:
            pass
    raise ParseError(f"Unknown position: {position_str}")


def load_players_from_csv(csv_path: Path) -> list[Player]:
    """
    Load the player directory from a CSV file.

    Expected columns: id, name, position, and optionally team_id and
    star_rating. Rows that cannot be parsed are skipped.

    Args:
        csv_path: Path to the CSV file.

    Returns:
        List of Player objects, first occurrence of each id wins.
    """
    players: list[Player] = []
    seen_ids: set[int] = set()

    with open(csv_path, "r", newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for line_number, row in enumerate(reader, start=2):
            try:
                player_id = int(row["id"])
                if player_id in seen_ids:
                    continue
                team_id = row.get("team_id", "").strip()
                rating = row.get("star_rating", "").strip()
                players.append(
                    Player(
                        id=player_id,
                        name=row.get("name", "").strip(),
                        position=parse_position(row.get("position", "")),
                        team_id=int(team_id) if team_id else None,
                        star_rating=int(rating) if rating else DEFAULT_STAR_RATING,
                    )
                )
                seen_ids.add(player_id)
            except (KeyError, TypeError, ValueError, ParseError) as e:
                logger.warning("Skipping %s line %d: %s", csv_path.name, line_number, e)
                continue

    return players
