"""Data access layer (repositories) for persistence operations.

Repositories take the Database object and open one session per call, so no
connection is held across a whole reconciliation run. They return domain
models rather than ORM models.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from pydantic import ValidationError
from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from recruit_match.domain.models import (
    Candidate,
    HydratedMatch,
    Match,
    MatchFilter,
    MatchStatus,
    Opportunity,
)
from recruit_match.utils.timestamps import format_for_storage, utc_now

from .database import Database
from .exceptions import DataIntegrityError, PersistenceError
from .schema import CandidateModel, MatchModel, OpportunityModel, dump_reasons

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class CandidateRepository:
    """Repository for candidate records."""

    def __init__(self, database: Database):
        self.database = database

    def list_candidates(self) -> List[Candidate]:
        """Return all candidates ordered by id.

        Rows that cannot be turned into a Candidate are logged and skipped.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            with self.database.session() as session:
                models = session.execute(
                    select(CandidateModel).order_by(CandidateModel.id)
                ).scalars().all()
                return _convert_rows(models, "candidate")

        except SQLAlchemyError as e:
            logger.error(f"Error listing candidates: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list candidates: {e}") from e

    def get_candidate(self, candidate_id: int) -> Optional[Candidate]:
        """Retrieve a candidate by id, or None if absent.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            with self.database.session() as session:
                model = session.get(CandidateModel, candidate_id)
                return model.to_domain() if model is not None else None

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving candidate {candidate_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve candidate: {e}") from e

    def save(self, candidate: Candidate) -> Candidate:
        """Insert a new candidate or overwrite the one with the same id.

        Args:
            candidate: Candidate to store; a None id lets the database assign one

        Returns:
            Stored Candidate with its id

        Raises:
            DataIntegrityError: If a constraint is violated
            PersistenceError: If database error occurs
        """
        try:
            with self.database.session() as session:
                existing = (
                    session.get(CandidateModel, candidate.id) if candidate.id is not None else None
                )
                if existing is not None:
                    existing.apply(candidate)
                    model = existing
                else:
                    model = CandidateModel.from_domain(candidate)
                    session.add(model)
                session.flush()
                return model.to_domain()

        except IntegrityError as e:
            logger.error(f"Integrity error saving candidate {candidate.id}: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to save candidate: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error saving candidate {candidate.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to save candidate: {e}") from e


class OpportunityRepository:
    """Repository for opportunity records (job postings and schools)."""

    def __init__(self, database: Database):
        self.database = database

    def list_opportunities(self, active_only: bool = True) -> List[Opportunity]:
        """Return opportunities ordered by id.

        Args:
            active_only: Exclude inactive opportunities

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(OpportunityModel).order_by(OpportunityModel.id)
            if active_only:
                stmt = stmt.where(OpportunityModel.is_active.is_(True))

            with self.database.session() as session:
                models = session.execute(stmt).scalars().all()
                return _convert_rows(models, "opportunity")

        except SQLAlchemyError as e:
            logger.error(f"Error listing opportunities: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list opportunities: {e}") from e

    def get_opportunity(self, opportunity_id: int) -> Optional[Opportunity]:
        """Retrieve an opportunity by id regardless of active flag, or None.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            with self.database.session() as session:
                model = session.get(OpportunityModel, opportunity_id)
                return model.to_domain() if model is not None else None

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving opportunity {opportunity_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve opportunity: {e}") from e

    def save(self, opportunity: Opportunity) -> Opportunity:
        """Insert a new opportunity or overwrite the one with the same id.

        Raises:
            DataIntegrityError: If a constraint is violated
            PersistenceError: If database error occurs
        """
        try:
            with self.database.session() as session:
                existing = (
                    session.get(OpportunityModel, opportunity.id)
                    if opportunity.id is not None
                    else None
                )
                if existing is not None:
                    existing.apply(opportunity)
                    model = existing
                else:
                    model = OpportunityModel.from_domain(opportunity)
                    session.add(model)
                session.flush()
                return model.to_domain()

        except IntegrityError as e:
            logger.error(
                f"Integrity error saving opportunity {opportunity.id}: {e}", exc_info=True
            )
            raise DataIntegrityError(f"Failed to save opportunity: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error saving opportunity {opportunity.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to save opportunity: {e}") from e


class MatchRepository:
    """Repository for match records.

    Implements the MatchStore contract. Readers are used only to hydrate
    listings; they default to the SQL repositories on the same database.
    """

    def __init__(
        self,
        database: Database,
        candidate_reader=None,
        opportunity_reader=None,
        clock: Callable = utc_now,
    ):
        """Initialize MatchRepository.

        Args:
            database: Database to read and write matches in
            candidate_reader: Source of candidates for hydration
            opportunity_reader: Source of opportunities for hydration
            clock: Returns the current UTC time; injectable for tests
        """
        self.database = database
        self.candidate_reader = candidate_reader or CandidateRepository(database)
        self.opportunity_reader = opportunity_reader or OpportunityRepository(database)
        self.clock = clock

    def upsert_match(
        self,
        candidate_id: int,
        opportunity_id: int,
        score: int,
        reasons: Sequence[str],
        status: Optional[MatchStatus] = None,
    ) -> Match:
        """Insert the match for a pair, or refresh it in place if it exists.

        Runs as a single INSERT ... ON CONFLICT DO UPDATE on the
        (candidate_id, opportunity_id) constraint, so concurrent calls for the
        same pair never create a second row. An existing row gets a new score,
        reasons and updated_at; its status changes only when ``status`` is
        given and its notes are never touched. A new row starts at ``status``
        or pending.

        Args:
            candidate_id: Candidate id
            opportunity_id: Opportunity id
            score: Score 0-100
            reasons: Reasons in evaluation order
            status: Explicit status to apply, if any

        Returns:
            The stored Match

        Raises:
            DataIntegrityError: If the score violates the range constraint
            PersistenceError: If database error occurs or the dialect has no upsert
        """
        now = format_for_storage(self.clock())
        insert_status = MatchStatus(status).value if status is not None else MatchStatus.PENDING.value

        try:
            insert_fn = _DIALECT_INSERTS.get(self.database.dialect_name)
            if insert_fn is None:
                raise PersistenceError(
                    f"Atomic upsert is not supported for dialect '{self.database.dialect_name}'"
                )

            stmt = insert_fn(MatchModel).values(
                candidate_id=candidate_id,
                opportunity_id=opportunity_id,
                score=score,
                reasons=dump_reasons(reasons),
                status=insert_status,
                notes=None,
                created_at=now,
                updated_at=now,
            )
            refreshed = {
                "score": stmt.excluded.score,
                "reasons": stmt.excluded.reasons,
                "updated_at": stmt.excluded.updated_at,
            }
            if status is not None:
                refreshed["status"] = stmt.excluded.status
            stmt = stmt.on_conflict_do_update(
                index_elements=["candidate_id", "opportunity_id"],
                set_=refreshed,
            )

            with self.database.session() as session:
                session.execute(stmt)
                model = session.execute(
                    select(MatchModel).where(
                        MatchModel.candidate_id == candidate_id,
                        MatchModel.opportunity_id == opportunity_id,
                    )
                ).scalar_one()
                return model.to_domain()

        except IntegrityError as e:
            logger.error(
                f"Integrity error upserting match {candidate_id}/{opportunity_id}: {e}",
                exc_info=True,
            )
            raise DataIntegrityError(
                f"Failed to upsert match due to constraint violation: {e}"
            ) from e
        except SQLAlchemyError as e:
            logger.error(
                f"Error upserting match {candidate_id}/{opportunity_id}: {e}", exc_info=True
            )
            raise PersistenceError(f"Failed to upsert match: {e}") from e

    def get_match(self, match_id: int) -> Optional[Match]:
        """Retrieve a match by id, or None if absent."""
        try:
            with self.database.session() as session:
                model = session.get(MatchModel, match_id)
                return model.to_domain() if model is not None else None

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving match {match_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve match: {e}") from e

    def get_match_for_pair(self, candidate_id: int, opportunity_id: int) -> Optional[Match]:
        """Retrieve the match for a pair, or None if absent."""
        try:
            with self.database.session() as session:
                model = session.execute(
                    select(MatchModel).where(
                        MatchModel.candidate_id == candidate_id,
                        MatchModel.opportunity_id == opportunity_id,
                    )
                ).scalar_one_or_none()
                return model.to_domain() if model is not None else None

        except SQLAlchemyError as e:
            logger.error(
                f"Error retrieving match {candidate_id}/{opportunity_id}: {e}", exc_info=True
            )
            raise PersistenceError(f"Failed to retrieve match: {e}") from e

    def list_matches(self, match_filter: Optional[MatchFilter] = None) -> List[HydratedMatch]:
        """List matches with their candidate and opportunity attached.

        Ordered by score descending, then most recently updated first, then id
        descending. A side that no longer exists or fails to load is None on
        that match; it never aborts the listing.

        Args:
            match_filter: Optional candidate/opportunity/status filters

        Returns:
            List of HydratedMatch (empty if none found)

        Raises:
            PersistenceError: If the match query itself fails
        """
        match_filter = match_filter or MatchFilter()
        stmt = select(MatchModel)
        if match_filter.candidate_id is not None:
            stmt = stmt.where(MatchModel.candidate_id == match_filter.candidate_id)
        if match_filter.opportunity_id is not None:
            stmt = stmt.where(MatchModel.opportunity_id == match_filter.opportunity_id)
        if match_filter.status is not None:
            stmt = stmt.where(MatchModel.status == MatchStatus(match_filter.status).value)
        stmt = stmt.order_by(
            MatchModel.score.desc(),
            MatchModel.updated_at.desc(),
            MatchModel.id.desc(),
        )

        try:
            with self.database.session() as session:
                matches = [m.to_domain() for m in session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing matches: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list matches: {e}") from e

        candidates: Dict[int, Optional[Candidate]] = {}
        opportunities: Dict[int, Optional[Opportunity]] = {}
        hydrated = []
        for match in matches:
            if match.candidate_id not in candidates:
                candidates[match.candidate_id] = self._hydrate(
                    self.candidate_reader.get_candidate, match.candidate_id, "candidate", match
                )
            if match.opportunity_id not in opportunities:
                opportunities[match.opportunity_id] = self._hydrate(
                    self.opportunity_reader.get_opportunity,
                    match.opportunity_id,
                    "opportunity",
                    match,
                )
            hydrated.append(
                HydratedMatch(
                    match=match,
                    candidate=candidates[match.candidate_id],
                    opportunity=opportunities[match.opportunity_id],
                )
            )
        return hydrated

    def update_status(
        self, match_id: int, status: MatchStatus, notes: Optional[str] = None
    ) -> bool:
        """Set a match's status, and its notes when given.

        No transition rules are enforced here. updated_at is bumped.

        Args:
            match_id: Match id
            status: New status
            notes: New notes; None leaves existing notes unchanged

        Returns:
            True if a row was updated, False if the match does not exist

        Raises:
            PersistenceError: If database error occurs
        """
        values = {
            "status": MatchStatus(status).value,
            "updated_at": format_for_storage(self.clock()),
        }
        if notes is not None:
            values["notes"] = notes

        try:
            with self.database.session() as session:
                result = session.execute(
                    update(MatchModel).where(MatchModel.id == match_id).values(**values)
                )
                return result.rowcount > 0

        except SQLAlchemyError as e:
            logger.error(f"Error updating status for match {match_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update match status: {e}") from e

    @staticmethod
    def _hydrate(getter, record_id: int, kind: str, match: Match):
        try:
            record = getter(record_id)
        except Exception as e:
            logger.warning(
                f"Could not load {kind} {record_id} for match {match.id}: {e}",
                extra={
                    "event": "match.hydration.failed",
                    "match_id": match.id,
                    "side": kind,
                    "record_id": record_id,
                    "error": str(e),
                },
            )
            return None

        if record is None:
            logger.debug(
                f"{kind.title()} {record_id} referenced by match {match.id} not found",
                extra={"event": "match.hydration.missing", "match_id": match.id, "side": kind},
            )
        return record


def _convert_rows(models, kind: str) -> list:
    records = []
    for model in models:
        try:
            records.append(model.to_domain())
        except ValidationError as e:
            logger.warning(
                f"Skipping invalid {kind} row {model.id}: {e}",
                extra={"event": f"{kind}.row.invalid", "record_id": model.id},
            )
    return records
