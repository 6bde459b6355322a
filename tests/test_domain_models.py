"""Unit tests for domain models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from recruit_match.domain.models import (
    Candidate,
    HydratedMatch,
    Match,
    MatchStatus,
    Opportunity,
    OpportunityKind,
    is_conventional_transition,
)


class TestCandidate:
    """Tests for Candidate model."""

    def test_valid_candidate(self):
        candidate = Candidate(
            id=17,
            first_name=" Alex ",
            last_name="Morgan",
            preferred_locations=["Shanghai", "Hangzhou"],
            preferred_level="Primary",
            subject_specialty="English",
            years_experience="3-5",
        )

        assert candidate.first_name == "Alex"
        assert candidate.preferred_locations == frozenset({"Shanghai", "Hangzhou"})
        assert candidate.status == "pending"
        assert candidate.display_name == "Alex Morgan"

    def test_locations_from_json_text(self):
        candidate = Candidate(id=1, preferred_locations='["Beijing", "Tianjin"]')
        assert candidate.preferred_locations == frozenset({"Beijing", "Tianjin"})

    def test_locations_from_json_string(self):
        candidate = Candidate(id=1, preferred_locations='"Shanghai"')
        assert candidate.preferred_locations == frozenset({"Shanghai"})

    def test_malformed_locations_become_empty(self):
        """Test that junk in a list field is treated as no preference."""
        assert Candidate(id=1, preferred_locations={"city": "x"}).preferred_locations == frozenset()
        assert Candidate(id=1, preferred_locations="null").preferred_locations == frozenset()

    def test_numeric_experience_kept_as_text(self):
        assert Candidate(id=1, years_experience=3).years_experience == "3"

    def test_blank_fields_become_none(self):
        candidate = Candidate(id=1, preferred_level="  ", subject_specialty="")
        assert candidate.preferred_level is None
        assert candidate.subject_specialty is None

    def test_status_normalized(self):
        assert Candidate(id=1, status=" INACTIVE ").status == "inactive"
        assert Candidate(id=1, status=None).status == "pending"

    def test_display_name_falls_back_to_id(self):
        assert Candidate(id=9).display_name == "Candidate 9"


class TestOpportunity:
    """Tests for Opportunity model."""

    def test_defaults(self):
        opportunity = Opportunity(id=1)

        assert opportunity.kind == OpportunityKind.JOB
        assert opportunity.is_active is True
        assert opportunity.levels_offered == frozenset()

    def test_kind_case_insensitive(self):
        assert Opportunity(id=1, kind="School").kind == OpportunityKind.SCHOOL

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            Opportunity(id=1, kind="agency")

    def test_missing_active_flag_means_active(self):
        assert Opportunity(id=1, is_active=None).is_active is True

    def test_subject_terms_union(self):
        opportunity = Opportunity(id=1, subjects_needed=["Science"], functions="English, Drama")
        assert opportunity.subject_terms == frozenset({"Science", "English", "Drama"})

    def test_display_name(self):
        assert Opportunity(id=3, title="Riverside School").display_name == "Riverside School"
        assert Opportunity(id=3, kind="school").display_name == "School 3"


class TestMatch:
    """Tests for Match model."""

    def _match(self, **overrides):
        fields = {
            "id": 1,
            "candidate_id": 1,
            "opportunity_id": 10,
            "score": 85,
            "created_at": datetime(2025, 11, 4, 12, 0, 0, tzinfo=timezone.utc),
            "updated_at": datetime(2025, 11, 4, 12, 0, 0, tzinfo=timezone.utc),
        }
        fields.update(overrides)
        return Match(**fields)

    def test_defaults(self):
        match = self._match()
        assert match.status == MatchStatus.PENDING
        assert match.reasons == []
        assert match.notes is None

    @pytest.mark.parametrize("score", [-1, 101])
    def test_score_bounds(self, score):
        with pytest.raises(ValidationError):
            self._match(score=score)

    def test_naive_timestamps_become_utc(self):
        match = self._match(created_at=datetime(2025, 11, 4, 12, 0, 0))
        assert match.created_at.tzinfo == timezone.utc

    def test_timestamps_converted_to_utc(self):
        shanghai = timezone(timedelta(hours=8))
        match = self._match(updated_at=datetime(2025, 11, 4, 20, 0, 0, tzinfo=shanghai))
        assert match.updated_at == datetime(2025, 11, 4, 12, 0, 0, tzinfo=timezone.utc)

    def test_status_from_string(self):
        assert self._match(status="contacted").status == MatchStatus.CONTACTED

    def test_invalid_status(self):
        with pytest.raises(ValidationError):
            self._match(status="hired")

    def test_hydrated_match_sides_optional(self):
        hydrated = HydratedMatch(match=self._match())
        assert hydrated.candidate is None
        assert hydrated.opportunity is None


class TestStatusWorkflow:
    """Tests for the advisory status order."""

    @pytest.mark.parametrize(
        "current,new",
        [
            (MatchStatus.PENDING, MatchStatus.CONTACTED),
            (MatchStatus.CONTACTED, MatchStatus.INTERVIEWED),
            (MatchStatus.INTERVIEWED, MatchStatus.PLACED),
            (MatchStatus.PENDING, MatchStatus.REJECTED),
            (MatchStatus.PENDING, MatchStatus.INTERVIEWED),
            (MatchStatus.PLACED, MatchStatus.PLACED),
        ],
    )
    def test_conventional(self, current, new):
        assert is_conventional_transition(current, new)

    @pytest.mark.parametrize(
        "current,new",
        [
            (MatchStatus.INTERVIEWED, MatchStatus.CONTACTED),
            (MatchStatus.PLACED, MatchStatus.PENDING),
            (MatchStatus.REJECTED, MatchStatus.PLACED),
            (MatchStatus.PLACED, MatchStatus.REJECTED),
        ],
    )
    def test_unconventional(self, current, new):
        assert not is_conventional_transition(current, new)

    def test_terminal_statuses(self):
        assert MatchStatus.PLACED.is_terminal
        assert MatchStatus.REJECTED.is_terminal
        assert not MatchStatus.INTERVIEWED.is_terminal

    def test_accepts_string_values(self):
        assert is_conventional_transition("pending", "contacted")
