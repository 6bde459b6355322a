"""In-memory implementations of the storage contracts.

Used by unit tests so the matcher, reconciler and service can be exercised
without a database. MatchStore semantics mirror the SQL repository: one row
per pair, refreshed in place, notes never touched by upsert.
"""

import itertools
import threading
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from recruit_match.domain.models import (
    Candidate,
    HydratedMatch,
    Match,
    MatchFilter,
    MatchStatus,
    Opportunity,
)
from recruit_match.persistence.exceptions import PersistenceError


class InMemoryCandidateReader:
    def __init__(self, candidates: Iterable[Candidate] = ()):
        self.candidates: Dict[int, Candidate] = {c.id: c for c in candidates}
        self.list_calls = 0

    def list_candidates(self) -> List[Candidate]:
        self.list_calls += 1
        return list(self.candidates.values())

    def get_candidate(self, candidate_id: int) -> Optional[Candidate]:
        return self.candidates.get(candidate_id)


class InMemoryOpportunityReader:
    def __init__(self, opportunities: Iterable[Opportunity] = ()):
        self.opportunities: Dict[int, Opportunity] = {o.id: o for o in opportunities}
        self.list_calls = 0

    def list_opportunities(self, active_only: bool = True) -> List[Opportunity]:
        self.list_calls += 1
        return [o for o in self.opportunities.values() if o.is_active or not active_only]

    def get_opportunity(self, opportunity_id: int) -> Optional[Opportunity]:
        return self.opportunities.get(opportunity_id)


class TickingClock:
    """Returns a strictly increasing UTC time on every call."""

    def __init__(self, start: Optional[datetime] = None, step_seconds: int = 1):
        self.current = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        self.step = timedelta(seconds=step_seconds)
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            self.current = self.current + self.step
            return self.current


class InMemoryMatchStore:
    """Thread-safe fake MatchStore.

    ``fail_on`` holds (candidate_id, opportunity_id) pairs whose upsert raises
    PersistenceError, to simulate a bad row.
    """

    def __init__(
        self,
        candidate_reader=None,
        opportunity_reader=None,
        fail_on: Iterable[Tuple[int, int]] = (),
        clock=None,
    ):
        self.candidate_reader = candidate_reader
        self.opportunity_reader = opportunity_reader
        self.fail_on: Set[Tuple[int, int]] = set(fail_on)
        self.clock = clock or TickingClock()
        self.rows: Dict[Tuple[int, int], Match] = {}
        self.upsert_calls: List[Tuple[int, int]] = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def upsert_match(
        self,
        candidate_id: int,
        opportunity_id: int,
        score: int,
        reasons: Sequence[str],
        status: Optional[MatchStatus] = None,
    ) -> Match:
        with self._lock:
            self.upsert_calls.append((candidate_id, opportunity_id))
            if (candidate_id, opportunity_id) in self.fail_on:
                raise PersistenceError(f"simulated failure for {candidate_id}/{opportunity_id}")

            now = self.clock()
            key = (candidate_id, opportunity_id)
            existing = self.rows.get(key)
            if existing is None:
                match = Match(
                    id=next(self._ids),
                    candidate_id=candidate_id,
                    opportunity_id=opportunity_id,
                    score=score,
                    reasons=list(reasons),
                    status=status or MatchStatus.PENDING,
                    created_at=now,
                    updated_at=now,
                )
            else:
                changes = {"score": score, "reasons": list(reasons), "updated_at": now}
                if status is not None:
                    changes["status"] = status
                match = existing.model_copy(update=changes)
            self.rows[key] = match
            return match

    def get_match(self, match_id: int) -> Optional[Match]:
        for match in self.rows.values():
            if match.id == match_id:
                return match
        return None

    def list_matches(self, match_filter: Optional[MatchFilter] = None) -> List[HydratedMatch]:
        match_filter = match_filter or MatchFilter()
        matches = [
            m
            for m in self.rows.values()
            if (match_filter.candidate_id is None or m.candidate_id == match_filter.candidate_id)
            and (
                match_filter.opportunity_id is None
                or m.opportunity_id == match_filter.opportunity_id
            )
            and (match_filter.status is None or m.status == match_filter.status)
        ]
        matches.sort(key=lambda m: (m.score, m.updated_at, m.id), reverse=True)
        return [
            HydratedMatch(
                match=m,
                candidate=self.candidate_reader.get_candidate(m.candidate_id)
                if self.candidate_reader
                else None,
                opportunity=self.opportunity_reader.get_opportunity(m.opportunity_id)
                if self.opportunity_reader
                else None,
            )
            for m in matches
        ]

    def update_status(
        self, match_id: int, status: MatchStatus, notes: Optional[str] = None
    ) -> bool:
        with self._lock:
            for key, match in self.rows.items():
                if match.id == match_id:
                    changes = {"status": MatchStatus(status), "updated_at": self.clock()}
                    if notes is not None:
                        changes["notes"] = notes
                    self.rows[key] = match.model_copy(update=changes)
                    return True
            return False
