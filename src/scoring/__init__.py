"""Fantasy scoring: event and statistic rules, fixture and round totals."""

from .rules import (
    EVENT_POINTS,
    POINTS_ASSIST,
    POINTS_GOAL,
    POINTS_PENALTY_SCORED,
    POINTS_SEVERE_FOUL,
    POINTS_STARTER,
    POINTS_YELLOW_CARD,
    STAT_TIERS,
    event_points,
    settle_stat_points,
    stat_points,
    tier_delta,
)
from .engine import MatchDataProvider, ScoringEngine, compute_fixture_scores

__all__ = [
    # Rules
    "EVENT_POINTS",
    "POINTS_ASSIST",
    "POINTS_GOAL",
    "POINTS_PENALTY_SCORED",
    "POINTS_SEVERE_FOUL",
    "POINTS_STARTER",
    "POINTS_YELLOW_CARD",
    "STAT_TIERS",
    "event_points",
    "settle_stat_points",
    "stat_points",
    "tier_delta",
    # Engine
    "MatchDataProvider",
    "ScoringEngine",
    "compute_fixture_scores",
]
