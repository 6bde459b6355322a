"""Integration tests: imported records through reconciliation to stored matches."""

from pathlib import Path

import pytest

from recruit_match.domain.models import MatchFilter, MatchStatus
from recruit_match.matching import Direction
from recruit_match.persistence import (
    CandidateRepository,
    Database,
    MatchRepository,
    OpportunityRepository,
    import_records,
)
from recruit_match.services import MatchingService
from tests.helpers import TickingClock

SAMPLE_RECORDS = Path(__file__).parent.parent / "fixtures" / "sample_records.yaml"


@pytest.fixture
def database(tmp_path):
    """File-backed SQLite database seeded with the sample records."""
    db = Database(f"sqlite:///{tmp_path / 'integration.db'}").init()
    import_records(SAMPLE_RECORDS, db)
    yield db
    db.close()


@pytest.fixture
def service(database):
    candidates = CandidateRepository(database)
    opportunities = OpportunityRepository(database)
    matches = MatchRepository(
        database,
        candidate_reader=candidates,
        opportunity_reader=opportunities,
        clock=TickingClock(),
    )
    return MatchingService(candidates, opportunities, matches)


def _pairs(hydrated_matches):
    return [(h.match.candidate_id, h.match.opportunity_id) for h in hydrated_matches]


class TestBatchReconciliation:
    """Test a full reconciliation run against SQLite."""

    def test_candidate_run_summary(self, service):
        summary = service.run_batch_reconciliation()

        assert summary.direction == Direction.CANDIDATE_TO_OPPORTUNITY
        assert summary.candidates_processed == 3
        assert summary.candidates_skipped == 1
        assert summary.opportunities_processed == 3
        assert summary.pairs_attempted == 9
        assert summary.matches_created_or_updated == 6
        assert summary.failures == 0
        assert not summary.had_errors

    def test_listing_is_best_first(self, service):
        service.run_batch_reconciliation()

        listed = service.list_persisted_matches()

        assert _pairs(listed) == [(2, 102), (1, 101), (1, 103), (3, 103), (3, 102), (3, 101)]
        assert [h.match.score for h in listed] == [100, 100, 90, 70, 45, 45]
        assert listed[1].candidate.display_name == "Alex Morgan"
        assert listed[1].opportunity.title == "Primary English Teacher"

    def test_reasons_stored_in_criterion_order(self, service):
        service.run_batch_reconciliation()

        match = service.list_persisted_matches(MatchFilter(candidate_id=1, opportunity_id=103))[0]

        assert match.match.reasons == [
            "location preference partially matches",
            "level preference matches",
            "subject specialty matches",
        ]

    def test_both_directions_store_the_same_pairs(self, service):
        service.run_batch_reconciliation(Direction.OPPORTUNITY_TO_CANDIDATE)
        from_opportunities = sorted(_pairs(service.list_persisted_matches()))

        summary = service.run_batch_reconciliation(Direction.CANDIDATE_TO_OPPORTUNITY)

        assert summary.matches_created_or_updated == 6
        assert sorted(_pairs(service.list_persisted_matches())) == from_opportunities

    def test_rerun_keeps_reviewer_state(self, service):
        """Test that recomputing scores leaves status and notes alone."""
        service.run_batch_reconciliation()
        target = service.list_persisted_matches(MatchFilter(candidate_id=1, opportunity_id=101))[0]
        assert service.set_match_status(target.match.id, "contacted", "phone screen booked")

        service.run_batch_reconciliation()

        listed = service.list_persisted_matches()
        assert len(listed) == 6
        rerun = service.list_persisted_matches(MatchFilter(candidate_id=1, opportunity_id=101))[0]
        assert rerun.match.id == target.match.id
        assert rerun.match.status == MatchStatus.CONTACTED
        assert rerun.match.notes == "phone screen booked"
        assert rerun.match.updated_at > target.match.updated_at

    def test_higher_threshold_stores_fewer(self, service):
        summary = service.run_batch_reconciliation(persistence_threshold=90)

        assert summary.matches_created_or_updated == 3
        assert sorted(_pairs(service.list_persisted_matches())) == [(1, 101), (1, 103), (2, 102)]


class TestOnDemandRanking:
    """Test find operations against SQLite."""

    def test_candidates_for_opportunity(self, service):
        results = service.find_matches_for_opportunity(101)

        assert [(r.candidate.id, r.score) for r in results] == [(1, 100), (3, 45), (2, 15)]
        assert results[1].reasons[0] == "open to any location"

    def test_opportunities_for_candidate(self, service):
        results = service.find_matches_for_candidate(1)
        assert [(r.opportunity.id, r.score) for r in results] == [(101, 100), (103, 90), (102, 15)]

    def test_find_does_not_persist(self, service):
        service.find_matches_for_candidate(1)
        service.find_matches_for_opportunity(101)
        assert service.list_persisted_matches() == []
