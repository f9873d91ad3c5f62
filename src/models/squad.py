"""Squad data models: candidate slots, draft-in-progress and finalized rosters."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..errors import ValidationError
from .player import Player


CANDIDATES_PER_SLOT = 4


class SquadStatus(Enum):
    """Lifecycle state of a squad for one (user, league, round)."""

    IN_PROGRESS = "in_progress"
    FINALIZED = "finalized"


@dataclass
class CandidateSlot:
    """
    Four candidate players for one position instance.

    Attributes:
        candidates: Exactly four candidate players.
        chosen_index: Index (0-3) of the picked candidate, None until chosen.
    """

    candidates: list[Player]
    chosen_index: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate slot shape."""
        if len(self.candidates) != CANDIDATES_PER_SLOT:
            raise ValidationError(
                f"A slot needs exactly {CANDIDATES_PER_SLOT} candidates, "
                f"got {len(self.candidates)}"
            )
        if self.chosen_index is not None and not (
            0 <= self.chosen_index < CANDIDATES_PER_SLOT
        ):
            raise ValidationError(
                f"chosen_index must be between 0 and {CANDIDATES_PER_SLOT - 1}"
            )

    @property
    def is_chosen(self) -> bool:
        """Check if the user has picked a candidate."""
        return self.chosen_index is not None

    @property
    def chosen(self) -> Optional[Player]:
        """The picked candidate, if any."""
        if self.chosen_index is None:
            return None
        return self.candidates[self.chosen_index]

    @property
    def candidate_ids(self) -> list[int]:
        """Ids of all four candidates in order."""
        return [player.id for player in self.candidates]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON stored with the squad."""
        return {
            "candidates": [player.to_dict() for player in self.candidates],
            "chosen_index": self.chosen_index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CandidateSlot":
        """
        Build a slot from its JSON form.

        Raises:
            ValidationError: If the payload is malformed.
        """
        try:
            candidates = [Player.from_dict(entry) for entry in data["candidates"]]
            chosen_index = data.get("chosen_index")
            if chosen_index is not None:
                chosen_index = int(chosen_index)
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Malformed slot payload: {e}") from e
        return cls(candidates=candidates, chosen_index=chosen_index)


@dataclass
class TemporarySquad:
    """
    A draft in progress for one (user, league, round).

    Attributes:
        id: Squad identifier.
        user_id: Owner of the squad.
        league_id: League the squad plays in.
        round_id: Round the squad is drafted for.
        formation: Formation preset name.
        slots: Candidate slots, forwards first and goalkeeper last.
        status: Lifecycle state.
    """

    id: int
    user_id: int
    league_id: int
    round_id: int
    formation: str
    slots: list[CandidateSlot] = field(default_factory=list)
    status: SquadStatus = SquadStatus.IN_PROGRESS

    @property
    def is_complete(self) -> bool:
        """Check if every slot has a chosen candidate."""
        return all(slot.is_chosen for slot in self.slots)

    @property
    def player_ids(self) -> list[int]:
        """Ids of every candidate across every slot."""
        return [player_id for slot in self.slots for player_id in slot.candidate_ids]

    @property
    def missing_selections(self) -> list[int]:
        """Indexes of slots without a chosen candidate."""
        return [i for i, slot in enumerate(self.slots) if not slot.is_chosen]


@dataclass
class FinalizedSquad:
    """
    An immutable roster with one player per slot.

    Attributes:
        id: Squad identifier.
        user_id: Owner of the squad.
        league_id: League the squad plays in.
        round_id: Round the squad was drafted for.
        formation: Formation preset name.
        players: The chosen players.
    """

    id: int
    user_id: int
    league_id: int
    round_id: int
    formation: str
    players: list[Player] = field(default_factory=list)


def slots_to_json(slots: list[CandidateSlot]) -> list[dict[str, Any]]:
    """Serialize a slot list for storage."""
    return [slot.to_dict() for slot in slots]


def slots_from_json(data: list[dict[str, Any]]) -> list[CandidateSlot]:
    """Deserialize a stored slot list."""
    return [CandidateSlot.from_dict(entry) for entry in data]
