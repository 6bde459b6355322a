"""Builders for domain objects used across tests."""

from recruit_match.domain.models import Candidate, Opportunity


def make_candidate(candidate_id: int = 1, **overrides) -> Candidate:
    """Candidate preferring Shanghai / Primary / English / 3-5 unless overridden."""
    fields = {
        "id": candidate_id,
        "first_name": "Alex",
        "last_name": "Morgan",
        "email": "alex@example.com",
        "preferred_locations": ["Shanghai"],
        "preferred_level": "Primary",
        "subject_specialty": "English",
        "years_experience": "3-5",
        "status": "pending",
    }
    fields.update(overrides)
    return Candidate(**fields)


def make_opportunity(opportunity_id: int = 10, **overrides) -> Opportunity:
    """Active Shanghai primary English job needing 3-5 years unless overridden."""
    fields = {
        "id": opportunity_id,
        "kind": "job",
        "title": "Primary English Teacher",
        "location": "Shanghai",
        "city": None,
        "levels_offered": ["Primary"],
        "subjects_needed": ["English"],
        "experience_required": "3-5",
        "is_active": True,
    }
    fields.update(overrides)
    return Opportunity(**fields)
