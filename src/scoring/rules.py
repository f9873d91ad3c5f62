"""Fantasy scoring rules for match events and team statistics."""

from typing import Optional

from ..models import EventType, Position, StatType


# Appearance and event points
POINTS_STARTER = 3
POINTS_GOAL = 4
POINTS_ASSIST = 3
POINTS_PENALTY_SCORED = 4
POINTS_YELLOW_CARD = -1
POINTS_SEVERE_FOUL = -3

# Flat points for events scored against the primary player. Goals and
# assists are handled separately because they credit two players.
EVENT_POINTS: dict[EventType, int] = {
    EventType.PENALTY: POINTS_PENALTY_SCORED,
    EventType.YELLOWCARD: POINTS_YELLOW_CARD,
    EventType.REDCARD: POINTS_SEVERE_FOUL,
    EventType.YELLOWREDCARD: POINTS_SEVERE_FOUL,
}

# (threshold, delta) steps with strictly ascending thresholds.
Tiers = list[tuple[float, int]]

STAT_TIERS: dict[tuple[StatType, Position], Tiers] = {
    # Shots on target: forwards are expected to shoot
    (StatType.SHOTS_ON_TARGET, Position.FORWARD): [(0, -1), (3, 1), (5, 2), (8, 3)],
    (StatType.SHOTS_ON_TARGET, Position.MIDFIELD): [(4, 1), (7, 2)],
    # Pass accuracy percentage
    (StatType.PASS_ACCURACY, Position.MIDFIELD): [(0, -2), (60, 0), (75, 1), (85, 2), (90, 4)],
    (StatType.PASS_ACCURACY, Position.DEFENSE): [(0, -1), (60, 0), (80, 1), (90, 2)],
    (StatType.PASS_ACCURACY, Position.FORWARD): [(0, -1), (60, 0), (80, 1)],
    # Goalkeeping and blocking
    (StatType.SAVES, Position.GOALKEEPER): [(2, 1), (4, 2), (6, 3), (9, 5)],
    (StatType.SHOTS_BLOCKED, Position.DEFENSE): [(3, 1), (6, 2)],
    (StatType.SHOTS_BLOCKED, Position.GOALKEEPER): [(3, 1)],
    # Offsides only hurt forwards past a volume threshold
    (StatType.OFFSIDES, Position.FORWARD): [(4, -1), (7, -2)],
    # Defensive work
    (StatType.TACKLES, Position.DEFENSE): [(15, 1), (25, 2)],
    (StatType.TACKLES, Position.MIDFIELD): [(20, 1)],
    (StatType.INTERCEPTIONS, Position.DEFENSE): [(8, 1), (12, 2)],
}


def tier_delta(tiers: Tiers, value: float) -> int:
    """
    Points for a value under a step table.

    The delta of the highest threshold not above the value applies. Values
    below the first threshold score 0.

    Args:
        tiers: (threshold, delta) pairs with ascending thresholds.
        value: Observed statistic value.

    Returns:
        The applicable delta.
    """
    delta = 0
    for threshold, step in tiers:
        if value < threshold:
            break
        delta = step
    return delta


def stat_points(
    type_code: int,
    position: Position,
    value: float,
    tiers: Optional[dict[tuple[StatType, Position], Tiers]] = None,
) -> int:
    """
    Points a statistic awards to a player at a position.

    Args:
        type_code: Provider statistic type code.
        position: Player position.
        value: Team-level statistic value.
        tiers: Tier table; defaults to STAT_TIERS.

    Returns:
        The tier delta, or 0 for statistics that do not apply.
    """
    try:
        stat_type = StatType(type_code)
    except ValueError:
        return 0
    table = (tiers if tiers is not None else STAT_TIERS).get((stat_type, position))
    if table is None:
        return 0
    return tier_delta(table, value)


def event_points(event_type: Optional[EventType]) -> int:
    """Flat points for an event's primary player (0 when not scored)."""
    if event_type is None:
        return 0
    return EVENT_POINTS.get(event_type, 0)


def settle_stat_points(accumulated: int, started: bool) -> int:
    """
    Share of accumulated stat points a player keeps.

    Starters keep everything; substitutes keep half, truncated toward zero.
    """
    if started:
        return accumulated
    return int(accumulated / 2)
