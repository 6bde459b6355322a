"""Criteria evaluators for candidate/opportunity compatibility.

Each evaluator is a pure function over the relevant fields of one candidate
and one opportunity. Comparisons are case-insensitive and use substring
containment in either direction, so "Primary" matches "Primary School".

Evaluators are total: missing or malformed fields fall into an "unspecified"
tier instead of raising. The Criterion classes wrap the functions so the
scorer can run an ordered list of strategies.
"""

from typing import FrozenSet, Iterable, List, Optional, Tuple

from recruit_match.domain.models import Candidate, Opportunity
from recruit_match.utils.text import contains_either_way, normalize_text

from .models import Direction, Evaluation, WeightTable

NO_PREFERENCE_TOKENS: FrozenSet[str] = frozenset(
    {"any", "anywhere", "no preference", "flexible"}
)

REASON_NO_LOCATION_PREFERENCE = "no location preference"
REASON_OPEN_TO_ANY_LOCATION = "open to any location"
REASON_LOCATION_MATCHES = "location preference matches"
REASON_LOCATION_PARTIAL = "location preference partially matches"
REASON_LEVEL_FLEXIBLE = "flexible on level"
REASON_LEVEL_MATCHES = "level preference matches"
REASON_LEVEL_DIFFERS = "level preference differs"
REASON_SUBJECT_MATCHES = "subject specialty matches"
REASON_SUBJECT_DIFFERS = "subject specialty differs"
REASON_EXPERIENCE_MATCHES = "experience level matches"


def _normalized_terms(values: Iterable[str]) -> List[str]:
    terms = (normalize_text(v) for v in values)
    return [t for t in terms if t]


def evaluate_location(
    preferred_locations: Iterable[str],
    location: Optional[str],
    city: Optional[str],
    weights: WeightTable,
    direction: Direction = Direction.CANDIDATE_TO_OPPORTUNITY,
) -> Evaluation:
    """Score how well preferred locations fit the opportunity's location or city.

    Args:
        preferred_locations: Candidate's preferred locations (empty = no preference)
        location: Opportunity location text
        city: Opportunity city, when stored separately
        weights: Weight table to award points from
        direction: Direction of the run, only affects the no-preference reason

    Returns:
        Evaluation for the location criterion
    """
    preferences = _normalized_terms(preferred_locations)

    if not preferences or any(p in NO_PREFERENCE_TOKENS for p in preferences):
        reason = (
            REASON_OPEN_TO_ANY_LOCATION
            if direction == Direction.OPPORTUNITY_TO_CANDIDATE
            else REASON_NO_LOCATION_PREFERENCE
        )
        return Evaluation("location", weights.location_no_preference, reason)

    targets = _normalized_terms([location or "", city or ""])
    if not targets:
        # Opportunity gives nowhere to compare against
        return Evaluation("location", weights.location_no_preference)

    if any(p == t for p in preferences for t in targets):
        return Evaluation("location", weights.location, REASON_LOCATION_MATCHES)

    if any(contains_either_way(p, t) for p in preferences for t in targets):
        return Evaluation("location", weights.location_partial, REASON_LOCATION_PARTIAL)

    return Evaluation("location", 0)


def evaluate_level(
    preferred_level: Optional[str],
    levels_offered: Iterable[str],
    weights: WeightTable,
) -> Evaluation:
    """Score the candidate's preferred level against the levels offered."""
    offered = _normalized_terms(levels_offered)
    preferred = normalize_text(preferred_level)

    if not offered or not preferred:
        return Evaluation("level", weights.level_unspecified)

    if preferred == "any" or "flexible" in preferred:
        return Evaluation("level", weights.level_flexible, REASON_LEVEL_FLEXIBLE)

    if any(contains_either_way(preferred, level) for level in offered):
        return Evaluation("level", weights.level, REASON_LEVEL_MATCHES)

    return Evaluation("level", weights.level_differs, REASON_LEVEL_DIFFERS)


def evaluate_subject(
    subject_specialty: Optional[str],
    subject_terms: Iterable[str],
    weights: WeightTable,
) -> Evaluation:
    """Score the candidate's specialty against the opportunity's subjects.

    ``subject_terms`` is expected to already contain the union of structured
    subjects and the legacy functions field.
    """
    subjects = _normalized_terms(subject_terms)
    specialty = normalize_text(subject_specialty)

    if not subjects or not specialty:
        return Evaluation("subject", weights.subject_unspecified)

    if any(contains_either_way(specialty, subject) for subject in subjects):
        return Evaluation("subject", weights.subject, REASON_SUBJECT_MATCHES)

    return Evaluation("subject", weights.subject_differs, REASON_SUBJECT_DIFFERS)


def evaluate_experience(
    years_experience: Optional[str],
    experience_required: Optional[str],
    weights: WeightTable,
) -> Evaluation:
    """Score the candidate's experience bucket against the requirement."""
    half = weights.experience // 2
    have = normalize_text(years_experience)
    need = normalize_text(experience_required)

    if not have or not need:
        return Evaluation("experience", half)

    if contains_either_way(have, need):
        return Evaluation("experience", weights.experience, REASON_EXPERIENCE_MATCHES)

    return Evaluation("experience", half)


class Criterion:
    """Base class for a scoring strategy over one dimension."""

    name: str = ""

    def evaluate(
        self,
        candidate: Candidate,
        opportunity: Opportunity,
        weights: WeightTable,
        direction: Direction,
    ) -> Evaluation:
        raise NotImplementedError


class LocationCriterion(Criterion):
    name = "location"

    def evaluate(self, candidate, opportunity, weights, direction):
        return evaluate_location(
            candidate.preferred_locations,
            opportunity.location,
            opportunity.city,
            weights,
            direction,
        )


class LevelCriterion(Criterion):
    name = "level"

    def evaluate(self, candidate, opportunity, weights, direction):
        return evaluate_level(candidate.preferred_level, opportunity.levels_offered, weights)


class SubjectCriterion(Criterion):
    name = "subject"

    def evaluate(self, candidate, opportunity, weights, direction):
        return evaluate_subject(candidate.subject_specialty, opportunity.subject_terms, weights)


class ExperienceCriterion(Criterion):
    name = "experience"

    def evaluate(self, candidate, opportunity, weights, direction):
        return evaluate_experience(
            candidate.years_experience, opportunity.experience_required, weights
        )


# Evaluation order is also reason order
DEFAULT_CRITERIA: Tuple[Criterion, ...] = (
    LocationCriterion(),
    LevelCriterion(),
    SubjectCriterion(),
    ExperienceCriterion(),
)
