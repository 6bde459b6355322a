"""Pairwise matcher: score one pair and persist it when it clears the threshold.

This module implements the single-pair path used by both the batch reconciler
and any caller that wants to refresh one match on demand:
1. Score the pair with the ScoreAggregator
2. Compare the score with the persistence threshold
3. Upsert the Match through the injected store, or skip without writing
"""

from typing import Optional

from recruit_match.domain.models import Candidate, Match, Opportunity
from recruit_match.logging import get_logger
from recruit_match.persistence.contracts import MatchStore

from .models import Direction, ScoreResult
from .scoring import ScoreAggregator

logger = get_logger(__name__, component="matching")

DEFAULT_PERSISTENCE_THRESHOLD = 40


class PairwiseMatcher:
    """Computes and persists the Match for a single candidate/opportunity pair.

    Low-scoring pairs are never written, so the match table holds only
    plausible pairings rather than the full cross-product.
    """

    def __init__(
        self,
        aggregator: ScoreAggregator,
        match_store: MatchStore,
        persistence_threshold: int = DEFAULT_PERSISTENCE_THRESHOLD,
    ):
        """Initialize PairwiseMatcher.

        Args:
            aggregator: Scorer used for every pair
            match_store: Storage for Match records
            persistence_threshold: Default minimum score for a pair to be persisted
        """
        self.aggregator = aggregator
        self.match_store = match_store
        self.persistence_threshold = persistence_threshold

    def score(
        self,
        candidate: Candidate,
        opportunity: Opportunity,
        direction: Direction = Direction.CANDIDATE_TO_OPPORTUNITY,
    ) -> ScoreResult:
        """Score a pair without persisting anything."""
        return self.aggregator.score(candidate, opportunity, direction)

    def match_one(
        self,
        candidate: Candidate,
        opportunity: Opportunity,
        persistence_threshold: Optional[int] = None,
        direction: Direction = Direction.CANDIDATE_TO_OPPORTUNITY,
    ) -> Optional[Match]:
        """Score a pair and upsert its Match if the score clears the threshold.

        Args:
            candidate: Candidate side of the pair (must have an id)
            opportunity: Opportunity side of the pair (must have an id)
            persistence_threshold: Override for the configured threshold
            direction: Direction of the calling run

        Returns:
            The stored Match, or None when the score is below the threshold

        Raises:
            ValueError: If either record has no id
            PersistenceError: If the store fails to write the match
        """
        if candidate.id is None or opportunity.id is None:
            raise ValueError("Both candidate and opportunity need an id to be matched")

        threshold = (
            self.persistence_threshold if persistence_threshold is None else persistence_threshold
        )
        result = self.score(candidate, opportunity, direction)

        if result.score < threshold:
            logger.debug(
                "Pair below persistence threshold",
                extra={
                    "event": "match.below_threshold",
                    "candidate_id": candidate.id,
                    "opportunity_id": opportunity.id,
                    "score": result.score,
                    "threshold": threshold,
                },
            )
            return None

        match = self.match_store.upsert_match(
            candidate.id, opportunity.id, result.score, result.reasons
        )

        logger.info(
            f"Match stored: candidate {candidate.id} / opportunity {opportunity.id}",
            extra={
                "event": "match.upserted",
                "candidate_id": candidate.id,
                "opportunity_id": opportunity.id,
                "score": result.score,
                "reason_count": len(result.reasons),
            },
        )
        return match
