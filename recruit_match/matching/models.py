"""Data models for the matching engine.

This module defines the weight table that drives scoring, the per-criterion
evaluation record, and the result structures returned by the scorer and by
on-demand match queries.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from recruit_match.domain.models import Candidate, Opportunity


class Direction(str, Enum):
    """Which side of the pairing drives a scoring run.

    Scoring arithmetic is identical in both directions; only the wording of the
    no-preference location reason differs.
    """

    CANDIDATE_TO_OPPORTUNITY = "candidates"
    OPPORTUNITY_TO_CANDIDATE = "opportunities"


class WeightTable(BaseModel):
    """Points awarded by each criterion tier.

    The canonical table is 40/30/30 for location/level/subject with experience
    contributing no extra points. Every partial tier must stay at or below the
    full weight of its criterion.
    """

    location: int = Field(40, ge=0, le=100, description="Exact location match")
    location_partial: int = Field(30, ge=0, le=100, description="Substring location match")
    location_no_preference: int = Field(
        20, ge=0, le=100, description="Candidate has no location preference"
    )

    level: int = Field(30, ge=0, le=100, description="Level preference matches")
    level_flexible: int = Field(20, ge=0, le=100, description="Candidate flexible on level")
    level_unspecified: int = Field(15, ge=0, le=100, description="Either side has no level")
    level_differs: int = Field(10, ge=0, le=100, description="Level preference differs")

    subject: int = Field(30, ge=0, le=100, description="Subject specialty matches")
    subject_unspecified: int = Field(10, ge=0, le=100, description="Either side has no subject")
    subject_differs: int = Field(5, ge=0, le=100, description="Subject specialty differs")

    experience: int = Field(0, ge=0, le=100, description="Experience bucket matches")

    @model_validator(mode="after")
    def validate_tiers(self) -> "WeightTable":
        """Ensure partial-credit tiers never exceed their criterion's full weight."""
        tiers = {
            "location": ("location_partial", "location_no_preference"),
            "level": ("level_flexible", "level_unspecified", "level_differs"),
            "subject": ("subject_unspecified", "subject_differs"),
        }
        for full_name, partial_names in tiers.items():
            full = getattr(self, full_name)
            for partial_name in partial_names:
                if getattr(self, partial_name) > full:
                    raise ValueError(
                        f"{partial_name} ({getattr(self, partial_name)}) must not exceed "
                        f"{full_name} ({full})"
                    )
        return self

    @property
    def max_score(self) -> int:
        """Highest total the table can award before clamping."""
        return self.location + self.level + self.subject + self.experience

    @classmethod
    def canonical(cls) -> "WeightTable":
        """The single weight table applied to both directions by default."""
        return cls()

    @classmethod
    def school_legacy(cls) -> "WeightTable":
        """Historical school-oriented table (40/25/25/10).

        Only for callers that need parity with old school rankings; it is
        never selected implicitly. The old school scoring had no flexible
        level tier: "any" fell through to the differs tier. Setting
        level_flexible to the differs points keeps the totals identical, but
        a flexible candidate still gets the "flexible on level" reason where
        old rankings gave "level preference differs".
        """
        return cls(level=25, level_flexible=10, subject=25, experience=10)


WEIGHT_PRESETS: Dict[str, WeightTable] = {
    "canonical": WeightTable.canonical(),
    "school_legacy": WeightTable.school_legacy(),
}


@dataclass(frozen=True)
class Evaluation:
    """Outcome of one criterion for one pair.

    Attributes:
        criterion: Criterion name (location, level, subject, experience)
        points: Points awarded
        reason: Short explanation, or None when the criterion has nothing to say
    """

    criterion: str
    points: int
    reason: Optional[str] = None


@dataclass(frozen=True)
class ScoreResult:
    """Aggregated score for one pair.

    Attributes:
        score: Total points clamped to 0-100
        reasons: Non-empty reasons in evaluation order
        evaluations: Raw per-criterion outcomes, in evaluation order
    """

    score: int
    reasons: List[str] = field(default_factory=list)
    evaluations: List[Evaluation] = field(default_factory=list)


@dataclass
class ScoredOpportunity:
    """An opportunity ranked for a candidate by an on-demand query."""

    opportunity: Opportunity
    score: int
    reasons: List[str] = field(default_factory=list)


@dataclass
class ScoredCandidate:
    """A candidate ranked for an opportunity by an on-demand query."""

    candidate: Candidate
    score: int
    reasons: List[str] = field(default_factory=list)
