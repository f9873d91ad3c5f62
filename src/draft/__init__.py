"""Draft generation: weighted candidate selection and squad lifecycle."""

from .selector import (
    STAR_WEIGHTS,
    WeightedCandidateSelector,
    star_weight,
    weighted_sample,
)
from .generator import DraftGenerator, build_candidate_slots, merge_selection

__all__ = [
    # Selector
    "STAR_WEIGHTS",
    "WeightedCandidateSelector",
    "star_weight",
    "weighted_sample",
    # Generator
    "DraftGenerator",
    "build_candidate_slots",
    "merge_selection",
]
