"""Storage contracts consumed by the matching engine.

The engine depends on these protocols rather than on concrete repositories,
so it can run against the SQLAlchemy repositories or against in-memory fakes.
"""

from typing import List, Optional, Protocol, Sequence

from recruit_match.domain.models import (
    Candidate,
    HydratedMatch,
    Match,
    MatchFilter,
    MatchStatus,
    Opportunity,
)


class CandidateReader(Protocol):
    """Read access to candidate records."""

    def list_candidates(self) -> List[Candidate]:
        ...

    def get_candidate(self, candidate_id: int) -> Optional[Candidate]:
        ...


class OpportunityReader(Protocol):
    """Read access to opportunity records."""

    def list_opportunities(self, active_only: bool = True) -> List[Opportunity]:
        ...

    def get_opportunity(self, opportunity_id: int) -> Optional[Opportunity]:
        ...


class MatchStore(Protocol):
    """Read/write access to match records.

    ``upsert_match`` must be atomic per (candidate_id, opportunity_id): two
    concurrent calls for the same pair leave exactly one row.
    """

    def upsert_match(
        self,
        candidate_id: int,
        opportunity_id: int,
        score: int,
        reasons: Sequence[str],
        status: Optional[MatchStatus] = None,
    ) -> Match:
        ...

    def list_matches(self, match_filter: Optional[MatchFilter] = None) -> List[HydratedMatch]:
        ...

    def get_match(self, match_id: int) -> Optional[Match]:
        ...

    def update_status(
        self, match_id: int, status: MatchStatus, notes: Optional[str] = None
    ) -> bool:
        ...
