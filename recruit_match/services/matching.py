"""Matching service: the engine's operations in one facade.

The CLI and any outer API layer talk to MatchingService only. It wires the
scorer, pairwise matcher and batch reconciler to the configured readers and
match store, and adds the advisory status-workflow checks.
"""

from typing import List, Optional

from recruit_match.config.models import AppConfig
from recruit_match.domain.models import (
    HydratedMatch,
    MatchFilter,
    MatchStatus,
    is_conventional_transition,
)
from recruit_match.logging import get_logger
from recruit_match.matching.engine import PairwiseMatcher
from recruit_match.matching.exceptions import InvalidStatusError
from recruit_match.matching.models import Direction, ScoredCandidate, ScoredOpportunity
from recruit_match.matching.scoring import ScoreAggregator
from recruit_match.persistence.contracts import CandidateReader, MatchStore, OpportunityReader
from recruit_match.persistence.database import Database
from recruit_match.persistence.exceptions import RecordNotFoundError
from recruit_match.persistence.repositories import (
    CandidateRepository,
    MatchRepository,
    OpportunityRepository,
)
from recruit_match.reconciliation.models import ReconciliationSummary
from recruit_match.reconciliation.runner import DEFAULT_EXCLUDED_STATUSES, BatchReconciler

logger = get_logger(__name__, component="service")


class MatchingService:
    """Facade over the matching engine."""

    def __init__(
        self,
        candidate_reader: CandidateReader,
        opportunity_reader: OpportunityReader,
        match_store: MatchStore,
        aggregator: Optional[ScoreAggregator] = None,
        persistence_threshold: int = 40,
        excluded_candidate_statuses=DEFAULT_EXCLUDED_STATUSES,
        default_direction: Direction = Direction.CANDIDATE_TO_OPPORTUNITY,
        max_workers: int = 1,
    ):
        self.candidate_reader = candidate_reader
        self.opportunity_reader = opportunity_reader
        self.match_store = match_store
        self.aggregator = aggregator or ScoreAggregator()
        self.default_direction = Direction(default_direction)
        self.excluded_candidate_statuses = frozenset(
            s.strip().lower() for s in excluded_candidate_statuses
        )
        self.matcher = PairwiseMatcher(self.aggregator, match_store, persistence_threshold)
        self.reconciler = BatchReconciler(
            candidate_reader,
            opportunity_reader,
            self.matcher,
            excluded_candidate_statuses=self.excluded_candidate_statuses,
            max_workers=max_workers,
        )

    @classmethod
    def from_config(cls, app_config: AppConfig, database: Database) -> "MatchingService":
        """Build a service backed by the SQL repositories on ``database``."""
        candidates = CandidateRepository(database)
        opportunities = OpportunityRepository(database)
        matches = MatchRepository(
            database, candidate_reader=candidates, opportunity_reader=opportunities
        )
        matching = app_config.matching

        max_workers = app_config.advanced.max_workers
        if max_workers > 1 and database.is_memory:
            # All sessions share one connection under StaticPool
            logger.warning(
                "In-memory SQLite cannot take concurrent writes; reconciling sequentially",
                extra={
                    "event": "service.max_workers.reduced",
                    "configured_max_workers": max_workers,
                },
            )
            max_workers = 1

        return cls(
            candidates,
            opportunities,
            matches,
            aggregator=ScoreAggregator(matching.weights),
            persistence_threshold=matching.persistence_threshold,
            excluded_candidate_statuses=matching.excluded_candidate_statuses,
            default_direction=matching.default_direction,
            max_workers=max_workers,
        )

    def find_matches_for_candidate(
        self, candidate_id: int, include_inactive: bool = False
    ) -> List[ScoredOpportunity]:
        """Rank opportunities for one candidate without persisting anything.

        Only opportunities scoring above zero are returned, highest score
        first; ties keep the readers' order.

        Args:
            candidate_id: Candidate to rank opportunities for
            include_inactive: Also score inactive opportunities

        Raises:
            RecordNotFoundError: If the candidate does not exist
        """
        candidate = self.candidate_reader.get_candidate(candidate_id)
        if candidate is None:
            raise RecordNotFoundError(f"Candidate {candidate_id} not found")

        opportunities = self.opportunity_reader.list_opportunities(
            active_only=not include_inactive
        )
        results = []
        for opportunity in opportunities:
            scored = self.aggregator.score(
                candidate, opportunity, Direction.CANDIDATE_TO_OPPORTUNITY
            )
            if scored.score > 0:
                results.append(ScoredOpportunity(opportunity, scored.score, scored.reasons))

        results.sort(key=lambda r: r.score, reverse=True)
        logger.info(
            f"Found {len(results)} opportunities for candidate {candidate_id}",
            extra={
                "event": "match.find.candidate",
                "candidate_id": candidate_id,
                "result_count": len(results),
            },
        )
        return results

    def find_matches_for_opportunity(self, opportunity_id: int) -> List[ScoredCandidate]:
        """Rank candidates for one opportunity without persisting anything.

        Candidates with an excluded status are skipped. Only scores above zero
        are returned, highest first.

        Raises:
            RecordNotFoundError: If the opportunity does not exist
        """
        opportunity = self.opportunity_reader.get_opportunity(opportunity_id)
        if opportunity is None:
            raise RecordNotFoundError(f"Opportunity {opportunity_id} not found")

        results = []
        for candidate in self.candidate_reader.list_candidates():
            if (candidate.status or "").lower() in self.excluded_candidate_statuses:
                continue
            scored = self.aggregator.score(
                candidate, opportunity, Direction.OPPORTUNITY_TO_CANDIDATE
            )
            if scored.score > 0:
                results.append(ScoredCandidate(candidate, scored.score, scored.reasons))

        results.sort(key=lambda r: r.score, reverse=True)
        logger.info(
            f"Found {len(results)} candidates for opportunity {opportunity_id}",
            extra={
                "event": "match.find.opportunity",
                "opportunity_id": opportunity_id,
                "result_count": len(results),
            },
        )
        return results

    def run_batch_reconciliation(
        self,
        direction: Optional[Direction] = None,
        persistence_threshold: Optional[int] = None,
    ) -> ReconciliationSummary:
        """Recompute matches for the whole population.

        Args:
            direction: Driving population (defaults to the configured one)
            persistence_threshold: Override for the configured threshold
        """
        return self.reconciler.run(direction or self.default_direction, persistence_threshold)

    def list_persisted_matches(
        self, match_filter: Optional[MatchFilter] = None
    ) -> List[HydratedMatch]:
        """List stored matches, best first, with both sides attached."""
        return self.match_store.list_matches(match_filter)

    def set_match_status(self, match_id: int, status, notes: Optional[str] = None) -> bool:
        """Record a reviewer's status change on a match.

        Any transition is written. Transitions against the conventional order
        are logged as warnings only.

        Args:
            match_id: Match to update
            status: New status (MatchStatus or its string value)
            notes: Reviewer notes; None keeps existing notes

        Returns:
            True if the match exists and was updated

        Raises:
            InvalidStatusError: If status is not a known workflow status
        """
        new_status = parse_status(status)

        current = self.match_store.get_match(match_id)
        if current is None:
            logger.warning(
                f"Status update for unknown match {match_id}",
                extra={"event": "match.status.not_found", "match_id": match_id},
            )
            return False

        if not is_conventional_transition(current.status, new_status):
            logger.warning(
                f"Unusual status change for match {match_id}: "
                f"{current.status.value} -> {new_status.value}",
                extra={
                    "event": "match.status.unconventional",
                    "match_id": match_id,
                    "from_status": current.status.value,
                    "to_status": new_status.value,
                },
            )

        updated = self.match_store.update_status(match_id, new_status, notes)
        if updated:
            logger.info(
                f"Match {match_id} status set to {new_status.value}",
                extra={
                    "event": "match.status.updated",
                    "match_id": match_id,
                    "status": new_status.value,
                    "notes_updated": notes is not None,
                },
            )
        return updated


def parse_status(value) -> MatchStatus:
    """Convert a status string (any letter case) to MatchStatus.

    Raises:
        InvalidStatusError: If the value is not a workflow status
    """
    if isinstance(value, MatchStatus):
        return value
    try:
        return MatchStatus(str(value).strip().lower())
    except ValueError:
        raise InvalidStatusError(str(value), [s.value for s in MatchStatus]) from None
