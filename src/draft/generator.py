"""Draft lifecycle: create, edit and finalize squads for a round."""

import logging
import random
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import (
    CANDIDATES_PER_SLOT,
    CandidateSlot,
    FinalizedSquad,
    Formation,
    Round,
    TemporarySquad,
    get_formation,
    slots_from_json,
)
from ..storage import DatabaseManager, PlayerRepository, RoundRepository, SquadRepository
from .selector import WeightedCandidateSelector

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def build_candidate_slots(
    selector: WeightedCandidateSelector,
    formation: Formation,
) -> list[CandidateSlot]:
    """
    Draw every candidate slot for a formation.

    Slots are drawn one at a time, forwards first and the goalkeeper last,
    and each draw excludes every player offered by the slots before it.

    Args:
        selector: Candidate selector bound to the player directory.
        formation: Formation fixing the slot counts.

    Returns:
        The slots in draw order, none of them chosen.
    """
    excluded: frozenset[int] = frozenset()
    slots: list[CandidateSlot] = []
    for position, count in formation.slot_counts:
        for _ in range(count):
            candidates, excluded = await selector.select_candidates(
                position, CANDIDATES_PER_SLOT, excluded
            )
            slots.append(CandidateSlot(candidates=candidates))
    return slots


def merge_selection(
    stored: list[CandidateSlot],
    submitted: list[CandidateSlot],
    squad_id: int,
) -> list[CandidateSlot]:
    """
    Apply submitted chosen indexes onto the stored slots.

    The submitted payload must have the stored shape: same slot count and
    the same candidate ids in the same order.

    Raises:
        ValidationError: If the payload does not match the stored slots.
    """
    if len(submitted) != len(stored):
        raise ValidationError(
            f"Malformed slot payload for squad {squad_id}: expected "
            f"{len(stored)} slots, got {len(submitted)}"
        )
    merged = []
    for index, (old, new) in enumerate(zip(stored, submitted)):
        if old.candidate_ids != new.candidate_ids:
            raise ValidationError(
                f"Malformed slot payload for squad {squad_id}: slot {index} "
                "candidates do not match the draft"
            )
        merged.append(CandidateSlot(candidates=old.candidates, chosen_index=new.chosen_index))
    return merged


class DraftGenerator:
    """
    Creates and manages draft squads.

    Each operation runs in its own database transaction.
    """

    def __init__(
        self,
        db: DatabaseManager,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Args:
            db: Initialized database manager.
            rng: Random source for candidate draws.
            clock: Returns the current time; used to close drafting once a
                round has started.
        """
        self.db = db
        self.rng = rng or random.Random()
        self.clock = clock

    async def create_draft(
        self,
        user_id: int,
        league_id: int,
        formation: str,
        round_id: int,
    ) -> TemporarySquad:
        """
        Create a draft with freshly drawn candidate slots.

        Drafting closes at the round's starting_at, not its ending_at: once
        the first fixture has kicked off the round is rejected, even while
        it is still being played. Rounds without a start time stay open.

        Args:
            user_id: Owner of the squad.
            league_id: League the squad plays in.
            formation: Formation preset name.
            round_id: Round to draft for.

        Returns:
            The new in-progress squad.

        Raises:
            ValidationError: Unsupported formation or the round has started.
            NotFoundError: Unknown round.
            ConflictError: A squad already exists for (user, league, round).
            InsufficientCandidatesError: Too few players for some position.
        """
        preset = get_formation(formation)

        async with self.db.session() as session:
            round_ = await RoundRepository(session).get(round_id)
            if round_ is None:
                raise NotFoundError(f"Round {round_id} not found")
            if round_.has_started(self.clock()):
                raise ValidationError(f"Round {round_.name} has already started")

            squads = SquadRepository(session)
            row = await squads.create(user_id, league_id, round_id, preset.name)

            selector = WeightedCandidateSelector(PlayerRepository(session), self.rng)
            slots = await build_candidate_slots(selector, preset)
            await squads.save_slots(row, slots)

            logger.info(
                "Created draft %s for user %s, league %s, round %s (%s)",
                row.id,
                user_id,
                league_id,
                round_id,
                preset.name,
            )
            return squads.to_temporary(row)

    async def update_draft(
        self, squad_id: int, slots: list[CandidateSlot]
    ) -> TemporarySquad:
        """
        Save the user's in-progress selections.

        Raises:
            NotFoundError: No such squad.
            ConflictError: The squad is already finalized.
            ValidationError: The slots do not match the drafted candidates.
        """
        async with self.db.session() as session:
            squads = SquadRepository(session)
            row = await squads.get(squad_id)
            if row is None:
                raise NotFoundError(f"Draft {squad_id} not found")
            if row.finalized:
                raise ConflictError(f"Draft {squad_id} is already finalized")

            merged = merge_selection(slots_from_json(row.slots), slots, squad_id)
            await squads.save_slots(row, merged)
            return squads.to_temporary(row)

    async def finalize_draft(self, squad: TemporarySquad) -> None:
        """
        Turn a fully chosen draft into a finalized roster.

        Roster links and the finalized flag are written in one transaction.
        Repeating the call with the same selection is a no-op.

        Raises:
            ValidationError: A slot has no chosen candidate, or the payload
                does not match the drafted candidates.
            NotFoundError: No such squad.
            ConflictError: The squad was finalized with a different selection.
        """
        missing = squad.missing_selections
        if missing:
            raise ValidationError(
                f"Missing selection in draft {squad.id}: slot(s) "
                f"{', '.join(str(i) for i in missing)} have no chosen player"
            )

        async with self.db.session() as session:
            squads = SquadRepository(session)
            row = await squads.get(squad.id)
            if row is None:
                raise NotFoundError(f"Draft {squad.id} not found")

            stored = slots_from_json(row.slots)
            merged = merge_selection(stored, squad.slots, squad.id)
            if row.finalized:
                if [s.chosen_index for s in stored] != [s.chosen_index for s in merged]:
                    raise ConflictError(
                        f"Draft {squad.id} was finalized with a different selection"
                    )
                logger.debug("Draft %s already finalized; retry is a no-op", squad.id)

            await squads.add_roster_links(row.id, [slot.chosen.id for slot in merged])
            await squads.save_slots(row, merged)
            await squads.mark_finalized(row)
            logger.info("Finalized draft %s", row.id)

    async def get_finalized_squad(
        self,
        user_id: int,
        league_id: int,
        round_name: Optional[str] = None,
    ) -> FinalizedSquad:
        """
        Get a finalized squad and its players.

        Args:
            user_id: Owner of the squad.
            league_id: League the squad plays in.
            round_name: Round display name; the current round when omitted.

        Raises:
            NotFoundError: No such round or no finalized squad for it.
        """
        async with self.db.session() as session:
            round_ = await self._resolve_round(session, round_name)
            squads = SquadRepository(session)
            row = await squads.find(user_id, league_id, round_.id)
            if row is None or not row.finalized:
                raise NotFoundError(
                    f"No finalized squad for user {user_id}, league {league_id}, "
                    f"round {round_.name}"
                )
            roster = {p.id: p for p in await squads.list_roster(row.id)}
            ordered = [
                roster[slot.chosen.id]
                for slot in slots_from_json(row.slots)
                if slot.chosen is not None and slot.chosen.id in roster
            ]
            return squads.to_finalized(row, ordered)

    async def get_draft(
        self,
        user_id: int,
        league_id: int,
        round_name: Optional[str] = None,
    ) -> TemporarySquad:
        """
        Get the in-progress draft for editing.

        Raises:
            NotFoundError: No such round or no draft for it.
            ConflictError: The draft is already finalized.
        """
        async with self.db.session() as session:
            round_ = await self._resolve_round(session, round_name)
            squads = SquadRepository(session)
            row = await squads.find(user_id, league_id, round_.id)
            if row is None:
                raise NotFoundError(
                    f"No draft for user {user_id}, league {league_id}, round {round_.name}"
                )
            if row.finalized:
                raise ConflictError(f"Draft {row.id} is already finalized")
            return squads.to_temporary(row)

    async def _resolve_round(
        self, session: AsyncSession, round_name: Optional[str]
    ) -> Round:
        rounds = RoundRepository(session)
        if round_name is not None:
            round_ = await rounds.get_by_name(round_name)
            if round_ is None:
                raise NotFoundError(f"Round {round_name!r} not found")
            return round_
        round_ = await rounds.get_current()
        if round_ is None:
            raise NotFoundError("No current round")
        return round_
