"""Core domain models for candidates, opportunities, and matches.

This module defines the data structures used throughout the application:
- Candidate: a teaching applicant, read from the intake records
- Opportunity: a job posting or school profile, read from the listings
- Match: the persisted compatibility record owned by the matching engine
- MatchStatus: the advisory review workflow for matches
- HydratedMatch: a match joined with its candidate and opportunity for display
- MatchFilter: optional filters for listing persisted matches

List-like fields on Candidate and Opportunity are normalized once, here, into
frozensets of strings. Malformed values degrade to an empty set instead of
failing validation, so scoring stays defined for every stored record.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, Field, field_validator

from recruit_match.utils.text import clean_optional_text, parse_text_list
from recruit_match.utils.timestamps import ensure_utc


class MatchStatus(str, Enum):
    """Review workflow for a match.

    The conventional order is pending -> contacted -> interviewed, ending in
    placed or rejected. The order is advisory: storage accepts any status
    change and nothing here raises on an unusual transition.
    """

    PENDING = "pending"
    CONTACTED = "contacted"
    INTERVIEWED = "interviewed"
    PLACED = "placed"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        """Whether this status conventionally ends the workflow."""
        return self in (MatchStatus.PLACED, MatchStatus.REJECTED)


_STATUS_RANK: Dict[MatchStatus, int] = {
    MatchStatus.PENDING: 0,
    MatchStatus.CONTACTED: 1,
    MatchStatus.INTERVIEWED: 2,
    MatchStatus.PLACED: 3,
    MatchStatus.REJECTED: 3,
}


def is_conventional_transition(current: MatchStatus, new: MatchStatus) -> bool:
    """Check whether a status change follows the conventional workflow order.

    Re-setting the same status is always conventional. Leaving a terminal
    status, or moving backwards, is not.

    Args:
        current: Status the match currently has
        new: Status being applied

    Returns:
        True if the change follows the usual order
    """
    current = MatchStatus(current)
    new = MatchStatus(new)
    if current == new:
        return True
    if current.is_terminal:
        return False
    return _STATUS_RANK[new] >= _STATUS_RANK[current]


class OpportunityKind(str, Enum):
    """Kinds of opportunity a candidate can be matched against."""

    JOB = "job"
    SCHOOL = "school"


class Candidate(BaseModel):
    """A teaching applicant as seen by the matching engine.

    Only the fields the engine scores on are required to be meaningful; the
    name and email fields are carried for display in match listings.
    """

    id: Optional[int] = Field(None, description="Record identifier")
    first_name: Optional[str] = Field(None, description="Given name")
    last_name: Optional[str] = Field(None, description="Family name")
    email: Optional[str] = Field(None, description="Contact email")
    preferred_locations: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Preferred locations (empty means no preference)",
    )
    preferred_level: Optional[str] = Field(
        None, description="Preferred age group or school level, may be 'any'/'flexible'"
    )
    subject_specialty: Optional[str] = Field(None, description="Main teaching subject")
    years_experience: Optional[str] = Field(None, description="Experience bucket, e.g. '3-5'")
    status: str = Field("pending", description="Application lifecycle status")

    @field_validator("preferred_locations", mode="before")
    @classmethod
    def parse_locations(cls, v: Any) -> FrozenSet[str]:
        """Normalize loosely typed location input into a set of strings."""
        return frozenset(parse_text_list(v))

    @field_validator(
        "first_name",
        "last_name",
        "email",
        "preferred_level",
        "subject_specialty",
        "years_experience",
        mode="before",
    )
    @classmethod
    def clean_text(cls, v: Any) -> Optional[str]:
        """Strip whitespace; blank or unusable values become None."""
        return clean_optional_text(v)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> str:
        """Lower-case the lifecycle status, defaulting to pending."""
        cleaned = clean_optional_text(v)
        return cleaned.lower() if cleaned else "pending"

    @property
    def display_name(self) -> str:
        """Human-readable name for reports."""
        parts = [p for p in (self.first_name, self.last_name) if p]
        if parts:
            return " ".join(parts)
        return f"Candidate {self.id}"

    model_config = {"json_schema_extra": {"example": {
        "id": 17,
        "first_name": "Alex",
        "last_name": "Morgan",
        "email": "alex@example.com",
        "preferred_locations": ["Shanghai", "Hangzhou"],
        "preferred_level": "Primary",
        "subject_specialty": "English",
        "years_experience": "3-5",
        "status": "pending",
    }}}


class Opportunity(BaseModel):
    """A job posting or school profile as seen by the matching engine."""

    id: Optional[int] = Field(None, description="Record identifier")
    kind: OpportunityKind = Field(OpportunityKind.JOB, description="Job posting or school")
    title: Optional[str] = Field(None, description="Job title or school name")
    location: Optional[str] = Field(None, description="Location text")
    city: Optional[str] = Field(None, description="City, when stored separately")
    levels_offered: FrozenSet[str] = Field(
        default_factory=frozenset, description="Age groups or levels taught"
    )
    subjects_needed: FrozenSet[str] = Field(
        default_factory=frozenset, description="Subjects the opportunity needs"
    )
    functions: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Legacy free-text job functions, matched like subjects",
    )
    experience_required: Optional[str] = Field(None, description="Experience bucket required")
    is_active: bool = Field(True, description="Whether the opportunity is open")

    @field_validator("levels_offered", "subjects_needed", "functions", mode="before")
    @classmethod
    def parse_text_sets(cls, v: Any) -> FrozenSet[str]:
        """Normalize loosely typed list input into a set of strings."""
        return frozenset(parse_text_list(v))

    @field_validator("title", "location", "city", "experience_required", mode="before")
    @classmethod
    def clean_text(cls, v: Any) -> Optional[str]:
        """Strip whitespace; blank or unusable values become None."""
        return clean_optional_text(v)

    @field_validator("kind", mode="before")
    @classmethod
    def normalize_kind(cls, v: Any) -> Any:
        """Accept kind in any letter case; missing kind means a job."""
        if v is None:
            return OpportunityKind.JOB
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("is_active", mode="before")
    @classmethod
    def default_active(cls, v: Any) -> Any:
        """Treat a missing flag as active."""
        return True if v is None else v

    @property
    def subject_terms(self) -> FrozenSet[str]:
        """Structured subjects unioned with the legacy functions field."""
        return self.subjects_needed | self.functions

    @property
    def display_name(self) -> str:
        """Human-readable name for reports."""
        return self.title or f"{self.kind.value.title()} {self.id}"

    model_config = {"json_schema_extra": {"example": {
        "id": 4,
        "kind": "job",
        "title": "Primary English Teacher",
        "location": "Shanghai",
        "city": "Shanghai",
        "levels_offered": ["Primary"],
        "subjects_needed": ["English"],
        "functions": [],
        "experience_required": "3-5",
        "is_active": True,
    }}}


class Match(BaseModel):
    """Persisted compatibility record between one candidate and one opportunity.

    At most one Match exists per (candidate_id, opportunity_id). Recomputing a
    pair refreshes score, reasons and updated_at in place.
    """

    id: Optional[int] = Field(None, description="Storage identifier")
    candidate_id: int = Field(..., description="Candidate this match is for")
    opportunity_id: int = Field(..., description="Opportunity this match is for")
    score: int = Field(..., ge=0, le=100, description="Compatibility score 0-100")
    reasons: List[str] = Field(
        default_factory=list, description="Reasons in evaluation order"
    )
    status: MatchStatus = Field(MatchStatus.PENDING, description="Review status")
    notes: Optional[str] = Field(None, description="Reviewer notes")
    created_at: datetime = Field(..., description="When the match was first stored (UTC)")
    updated_at: datetime = Field(..., description="When the match was last written (UTC)")

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Ensure datetime is timezone-aware and in UTC."""
        return ensure_utc(v)


class HydratedMatch(BaseModel):
    """A match joined with its candidate and opportunity.

    Either side is None when the referenced record no longer exists or could
    not be loaded.
    """

    match: Match
    candidate: Optional[Candidate] = None
    opportunity: Optional[Opportunity] = None


class MatchFilter(BaseModel):
    """Optional filters for listing persisted matches."""

    candidate_id: Optional[int] = None
    opportunity_id: Optional[int] = None
    status: Optional[MatchStatus] = None
