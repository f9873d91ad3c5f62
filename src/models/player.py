"""Player data model for the fantasy draft."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


DEFAULT_STAR_RATING = 3
MIN_STAR_RATING = 1
MAX_STAR_RATING = 5


class Position(Enum):
    """Player position, keyed by the provider's position code."""

    GOALKEEPER = 24
    DEFENSE = 25
    MIDFIELD = 26
    FORWARD = 27

    @classmethod
    def from_code(
        cls, code: Optional[int], default: Optional["Position"] = None
    ) -> "Position":
        """
        Map a provider position code to a Position.

        Args:
            code: Provider position id (24-27).
            default: Position returned for missing or unknown codes.

        Returns:
            The matching Position, or default.

        Raises:
            ValueError: If the code is unknown and no default is given.
        """
        try:
            return cls(code)
        except ValueError:
            if default is not None:
                return default
            raise ValueError(f"Unknown position code: {code}")


@dataclass
class Player:
    """
    Represents a player available in the draft.

    Attributes:
        id: Provider player identifier.
        name: Display name.
        position: Playing position.
        team_id: Provider team identifier.
        star_rating: Quality rating (1-5) used to bias draft selection.
        points: Cumulative fantasy points.
    """

    id: int
    name: str
    position: Position
    team_id: Optional[int] = None
    star_rating: Optional[int] = DEFAULT_STAR_RATING
    points: int = 0

    def __post_init__(self) -> None:
        """Validate player data after initialization."""
        if self.star_rating is not None and not (
            MIN_STAR_RATING <= self.star_rating <= MAX_STAR_RATING
        ):
            raise ValueError(
                f"star_rating must be between {MIN_STAR_RATING} and {MAX_STAR_RATING}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for storage inside a squad's slot payload."""
        return {
            "id": self.id,
            "name": self.name,
            "position": self.position.value,
            "team_id": self.team_id,
            "star_rating": self.star_rating,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Player":
        """Build a Player from a slot payload entry."""
        return cls(
            id=int(data["id"]),
            name=data.get("name", ""),
            position=Position.from_code(data["position"]),
            team_id=data.get("team_id"),
            star_rating=data.get("star_rating", DEFAULT_STAR_RATING),
        )
