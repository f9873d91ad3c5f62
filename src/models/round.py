"""Round (matchday) data model."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass
class Round:
    """
    A matchday in the competition calendar.

    Attributes:
        id: Provider round identifier.
        name: Display name, usually the matchday number.
        season_id: Provider season identifier.
        starting_at: When the first fixture of the round kicks off.
        ending_at: When the round ends.
        is_current: Whether this is the round currently being played.
    """

    id: int
    name: str
    season_id: Optional[int] = None
    starting_at: Optional[datetime] = None
    ending_at: Optional[datetime] = None
    is_current: bool = False

    def has_started(self, now: datetime) -> bool:
        """
        Check if the round has kicked off at the given time.

        Naive timestamps (as returned by SQLite) are treated as UTC.
        """
        if self.starting_at is None:
            return False
        starting_at = self.starting_at
        if starting_at.tzinfo is None:
            starting_at = starting_at.replace(tzinfo=timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return starting_at <= now
