"""Score aggregation over the ordered criteria."""

import logging
from typing import Iterable, Optional, Sequence

from recruit_match.domain.models import Candidate, Opportunity

from .criteria import DEFAULT_CRITERIA, Criterion
from .models import Direction, Evaluation, ScoreResult, WeightTable

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 100


def aggregate(evaluations: Iterable[Evaluation]) -> ScoreResult:
    """Combine criterion outcomes into a bounded score and ordered reasons.

    The total is clamped to [0, 100] so a misconfigured weight table can never
    produce an out-of-range score.

    Args:
        evaluations: Criterion outcomes in evaluation order

    Returns:
        ScoreResult with clamped score and the non-empty reasons
    """
    evaluations = list(evaluations)
    total = sum(e.points for e in evaluations)
    score = max(MIN_SCORE, min(MAX_SCORE, total))
    reasons = [e.reason for e in evaluations if e.reason]
    return ScoreResult(score=score, reasons=reasons, evaluations=evaluations)


class ScoreAggregator:
    """Scores a candidate/opportunity pair with a weight table and criteria.

    Stateless apart from its configuration; safe to share between threads.
    """

    def __init__(
        self,
        weights: Optional[WeightTable] = None,
        criteria: Sequence[Criterion] = DEFAULT_CRITERIA,
    ):
        """Initialize ScoreAggregator.

        Args:
            weights: Weight table (defaults to the canonical table)
            criteria: Ordered criteria to evaluate
        """
        self.weights = weights or WeightTable.canonical()
        self.criteria = tuple(criteria)

    def score(
        self,
        candidate: Candidate,
        opportunity: Opportunity,
        direction: Direction = Direction.CANDIDATE_TO_OPPORTUNITY,
    ) -> ScoreResult:
        """Score one pair.

        Args:
            candidate: Candidate to score
            opportunity: Opportunity to score against
            direction: Direction of the run (affects reason wording only)

        Returns:
            ScoreResult for the pair
        """
        evaluations = [
            criterion.evaluate(candidate, opportunity, self.weights, direction)
            for criterion in self.criteria
        ]
        result = aggregate(evaluations)

        logger.debug(
            f"Scored candidate {candidate.id} against opportunity {opportunity.id}: {result.score}",
            extra={
                "event": "match.scored",
                "candidate_id": candidate.id,
                "opportunity_id": opportunity.id,
                "score": result.score,
            },
        )
        return result
