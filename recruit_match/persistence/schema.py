"""Database schema definition and ORM models.

Candidates and opportunities are stored with their list fields as JSON text;
conversion to domain models runs the same lenient parsing that external input
gets, so older comma-separated rows still load. Match timestamps are stored as
fixed-width ISO 8601 strings.
"""

import json
import logging
from typing import Iterable, List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    inspect,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from recruit_match.domain.models import Candidate, Match, Opportunity
from recruit_match.utils.text import parse_text_list
from recruit_match.utils.timestamps import parse_from_storage

logger = logging.getLogger(__name__)

Base = declarative_base()


def _dump_list(values: Iterable[str]) -> str:
    return json.dumps(sorted(values), ensure_ascii=False)


class CandidateModel(Base):
    """ORM model for candidates table (read-mostly; owned by intake)."""

    __tablename__ = "candidates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)

    preferred_locations = Column(Text, nullable=True)
    preferred_level = Column(String(255), nullable=True)
    subject_specialty = Column(String(255), nullable=True)
    years_experience = Column(String(50), nullable=True)

    status = Column(String(50), nullable=False, default="pending")

    __table_args__ = (Index("idx_candidates_status", "status"),)

    def to_domain(self) -> Candidate:
        return Candidate(
            id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            preferred_locations=self.preferred_locations,
            preferred_level=self.preferred_level,
            subject_specialty=self.subject_specialty,
            years_experience=self.years_experience,
            status=self.status,
        )

    @classmethod
    def from_domain(cls, candidate: Candidate) -> "CandidateModel":
        model = cls(id=candidate.id)
        model.apply(candidate)
        return model

    def apply(self, candidate: Candidate) -> None:
        """Copy every field except id from a domain model."""
        self.first_name = candidate.first_name
        self.last_name = candidate.last_name
        self.email = candidate.email
        self.preferred_locations = _dump_list(candidate.preferred_locations)
        self.preferred_level = candidate.preferred_level
        self.subject_specialty = candidate.subject_specialty
        self.years_experience = candidate.years_experience
        self.status = candidate.status


class OpportunityModel(Base):
    """ORM model for opportunities table (jobs and schools share it)."""

    __tablename__ = "opportunities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    kind = Column(String(20), nullable=False, default="job")
    title = Column(Text, nullable=True)

    location = Column(String(255), nullable=True)
    city = Column(String(255), nullable=True)
    levels_offered = Column(Text, nullable=True)
    subjects_needed = Column(Text, nullable=True)
    functions = Column(Text, nullable=True)
    experience_required = Column(String(50), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (Index("idx_opportunities_active", "is_active"),)

    def to_domain(self) -> Opportunity:
        return Opportunity(
            id=self.id,
            kind=self.kind,
            title=self.title,
            location=self.location,
            city=self.city,
            levels_offered=self.levels_offered,
            subjects_needed=self.subjects_needed,
            functions=self.functions,
            experience_required=self.experience_required,
            is_active=self.is_active,
        )

    @classmethod
    def from_domain(cls, opportunity: Opportunity) -> "OpportunityModel":
        model = cls(id=opportunity.id)
        model.apply(opportunity)
        return model

    def apply(self, opportunity: Opportunity) -> None:
        """Copy every field except id from a domain model."""
        self.kind = opportunity.kind.value
        self.title = opportunity.title
        self.location = opportunity.location
        self.city = opportunity.city
        self.levels_offered = _dump_list(opportunity.levels_offered)
        self.subjects_needed = _dump_list(opportunity.subjects_needed)
        self.functions = _dump_list(opportunity.functions)
        self.experience_required = opportunity.experience_required
        self.is_active = opportunity.is_active


class MatchModel(Base):
    """ORM model for matches table.

    One row per (candidate_id, opportunity_id); the unique constraint is what
    the upsert conflicts on. Candidate and opportunity ids are plain columns
    rather than foreign keys, since the referenced records are owned by other
    subsystems and may be removed while the match history stays.
    """

    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    candidate_id = Column(Integer, nullable=False)
    opportunity_id = Column(Integer, nullable=False)

    score = Column(Integer, nullable=False)
    reasons = Column(Text, nullable=False, default="[]")

    status = Column(String(20), nullable=False, default="pending")
    notes = Column(Text, nullable=True)

    # Timestamps (stored as ISO 8601 strings)
    created_at = Column(String(50), nullable=False)
    updated_at = Column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint("candidate_id", "opportunity_id", name="uq_matches_pair"),
        CheckConstraint("score >= 0 AND score <= 100", name="ck_matches_score_range"),
        Index("idx_matches_status", "status"),
        Index("idx_matches_score", "score"),
        Index("idx_matches_opportunity", "opportunity_id"),
    )

    def to_domain(self) -> Match:
        return Match(
            id=self.id,
            candidate_id=self.candidate_id,
            opportunity_id=self.opportunity_id,
            score=self.score,
            reasons=_load_reasons(self.reasons),
            status=self.status,
            notes=self.notes,
            created_at=parse_from_storage(self.created_at),
            updated_at=parse_from_storage(self.updated_at),
        )


def dump_reasons(reasons: Iterable[str]) -> str:
    """Serialize reasons preserving their order."""
    return json.dumps(list(reasons), ensure_ascii=False)


def _load_reasons(raw: Optional[str]) -> List[str]:
    # Order matters here, so only fall back to loose parsing for non-JSON text
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        return parse_text_list(raw)
    return [r for r in value if isinstance(r, str)] if isinstance(value, list) else []


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent).

    Args:
        engine: SQLAlchemy engine instance
    """
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)

        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")

    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
