"""Matching engine for scoring candidates against opportunities.

This module provides:
- Criteria evaluators for location, level, subject and experience
- ScoreAggregator: combines criteria into a bounded score with reasons
- PairwiseMatcher: scores one pair and persists it above a threshold
- WeightTable and presets for configuring the scoring arithmetic
"""

from .criteria import (
    DEFAULT_CRITERIA,
    evaluate_experience,
    evaluate_level,
    evaluate_location,
    evaluate_subject,
)
from .engine import DEFAULT_PERSISTENCE_THRESHOLD, PairwiseMatcher
from .exceptions import InvalidStatusError, MatchingError
from .models import (
    WEIGHT_PRESETS,
    Direction,
    Evaluation,
    ScoreResult,
    ScoredCandidate,
    ScoredOpportunity,
    WeightTable,
)
from .scoring import ScoreAggregator, aggregate

__all__ = [
    "DEFAULT_CRITERIA",
    "DEFAULT_PERSISTENCE_THRESHOLD",
    "Direction",
    "Evaluation",
    "InvalidStatusError",
    "MatchingError",
    "PairwiseMatcher",
    "ScoreAggregator",
    "ScoreResult",
    "ScoredCandidate",
    "ScoredOpportunity",
    "WEIGHT_PRESETS",
    "WeightTable",
    "aggregate",
    "evaluate_experience",
    "evaluate_level",
    "evaluate_location",
    "evaluate_subject",
]
