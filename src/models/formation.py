"""Formation presets that fix how many slots a squad has per position."""

from dataclasses import dataclass

from ..errors import ValidationError
from .player import Position


GOALKEEPER_SLOTS = 1


@dataclass(frozen=True)
class Formation:
    """
    A named formation preset.

    Attributes:
        name: Preset name, e.g. "4-3-3".
        defenders: Defense slot count.
        midfielders: Midfield slot count.
        forwards: Forward slot count.
    """

    name: str
    defenders: int
    midfielders: int
    forwards: int

    @property
    def slot_counts(self) -> list[tuple[Position, int]]:
        """Slot counts in draft order: forwards first, goalkeeper last."""
        return [
            (Position.FORWARD, self.forwards),
            (Position.MIDFIELD, self.midfielders),
            (Position.DEFENSE, self.defenders),
            (Position.GOALKEEPER, GOALKEEPER_SLOTS),
        ]

    @property
    def total_slots(self) -> int:
        """Total number of candidate slots in a squad."""
        return sum(count for _, count in self.slot_counts)


FORMATIONS: dict[str, Formation] = {
    "4-3-3": Formation(name="4-3-3", defenders=4, midfielders=3, forwards=3),
    "4-4-2": Formation(name="4-4-2", defenders=4, midfielders=4, forwards=2),
    "3-4-3": Formation(name="3-4-3", defenders=3, midfielders=4, forwards=3),
}


def get_formation(name: str) -> Formation:
    """
    Look up a supported formation.

    Raises:
        ValidationError: If the formation is not a supported preset.
    """
    formation = FORMATIONS.get(name)
    if formation is None:
        raise ValidationError(
            f"Unsupported formation: {name!r} (expected one of {', '.join(FORMATIONS)})"
        )
    return formation
