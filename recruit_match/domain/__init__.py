"""Domain models for the Recruit Match engine."""

from .models import (
    Candidate,
    HydratedMatch,
    Match,
    MatchFilter,
    MatchStatus,
    Opportunity,
    OpportunityKind,
    is_conventional_transition,
)

__all__ = [
    "Candidate",
    "Opportunity",
    "OpportunityKind",
    "Match",
    "MatchStatus",
    "MatchFilter",
    "HydratedMatch",
    "is_conventional_transition",
]
