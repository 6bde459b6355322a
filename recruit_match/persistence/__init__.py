"""Persistence layer for candidates, opportunities and matches.

Public API:
    # Database lifecycle
    - Database(database_url).init() / .session() / .close()

    # Repositories
    - CandidateRepository: read (and import) candidate records
    - OpportunityRepository: read (and import) opportunity records
    - MatchRepository: atomic upsert, hydrated listing, status updates

    # Storage contracts used by the engine
    - CandidateReader, OpportunityReader, MatchStore

    # Exceptions
    - PersistenceError and its subclasses

Example usage:
    >>> from recruit_match.persistence import Database, MatchRepository
    >>> db = Database("sqlite:///./data/recruit_match.db").init()
    >>> repo = MatchRepository(db)
    >>> repo.upsert_match(1, 10, 85, ["location preference matches"])
"""

from .contracts import CandidateReader, MatchStore, OpportunityReader
from .database import Database, redact_url
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordImportError,
    RecordNotFoundError,
)
from .repositories import CandidateRepository, MatchRepository, OpportunityRepository
from .seed import ImportResult, import_records, load_records

__all__ = [
    # Database
    "Database",
    "redact_url",
    # Contracts
    "CandidateReader",
    "OpportunityReader",
    "MatchStore",
    # Repositories
    "CandidateRepository",
    "OpportunityRepository",
    "MatchRepository",
    # Import
    "ImportResult",
    "import_records",
    "load_records",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
    "RecordImportError",
]
