"""Import candidate and opportunity records from a YAML file.

Intake and listings normally own these records; the import exists so a local
database can be filled for trying out reconciliation. Expected layout:

    candidates:
      - id: 1
        first_name: Alex
        preferred_locations: [Shanghai]
        ...
    opportunities:
      - id: 10
        kind: job
        location: Shanghai
        ...

Records are validated as a whole before anything is written, so a file with
one bad record imports nothing.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

import yaml
from pydantic import ValidationError

from recruit_match.domain.models import Candidate, Opportunity
from recruit_match.logging import get_logger

from .database import Database
from .exceptions import RecordImportError
from .repositories import CandidateRepository, OpportunityRepository

logger = get_logger(__name__, component="import")


@dataclass
class ImportResult:
    """Counts of records written by an import."""

    candidates_saved: int = 0
    opportunities_saved: int = 0


def load_records(path: Path) -> Tuple[List[Candidate], List[Opportunity]]:
    """Parse and validate a records file without touching the database.

    Args:
        path: YAML file to read

    Returns:
        Tuple of (candidates, opportunities)

    Raises:
        RecordImportError: If the file is missing, unparseable or has invalid records
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise RecordImportError(f"Records file not found: {path}")
    except yaml.YAMLError as e:
        raise RecordImportError(f"Failed to parse records file {path}: {e}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise RecordImportError(
            f"Records file {path} must contain a mapping with 'candidates' and/or 'opportunities'"
        )

    errors: List[str] = []
    candidates = _validate_section(data.get("candidates") or [], Candidate, "candidates", errors)
    opportunities = _validate_section(
        data.get("opportunities") or [], Opportunity, "opportunities", errors
    )

    if errors:
        raise RecordImportError(f"Invalid records in {path}", errors=errors)

    return candidates, opportunities


def import_records(path: Path, database: Database) -> ImportResult:
    """Validate a records file and save every record in it.

    Records with an id overwrite the stored record with that id.

    Raises:
        RecordImportError: If the file is invalid (nothing is written)
        PersistenceError: If saving fails
    """
    candidates, opportunities = load_records(path)

    candidate_repo = CandidateRepository(database)
    opportunity_repo = OpportunityRepository(database)
    result = ImportResult()

    for candidate in candidates:
        candidate_repo.save(candidate)
        result.candidates_saved += 1
    for opportunity in opportunities:
        opportunity_repo.save(opportunity)
        result.opportunities_saved += 1

    logger.info(
        f"Imported {result.candidates_saved} candidates and "
        f"{result.opportunities_saved} opportunities from {path}",
        extra={
            "event": "records.imported",
            "candidates": result.candidates_saved,
            "opportunities": result.opportunities_saved,
        },
    )
    return result


def _validate_section(items, model, section: str, errors: List[str]) -> list:
    if not isinstance(items, list):
        errors.append(f"{section}: expected a list")
        return []

    records = []
    for index, item in enumerate(items):
        try:
            records.append(model.model_validate(item))
        except ValidationError as e:
            for error in e.errors():
                field_path = " -> ".join(str(loc) for loc in error["loc"]) or "(record)"
                errors.append(f"{section}[{index}] {field_path}: {error['msg']}")
    return records
