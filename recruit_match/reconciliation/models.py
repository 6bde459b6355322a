"""Data models for batch reconciliation tracking and reporting."""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from recruit_match.matching.models import Direction
from recruit_match.utils.timestamps import format_timestamp_for_log


@dataclass
class RowStats:
    """Counts for one outer row (a candidate or an opportunity) of a run."""

    pairs_attempted: int = 0
    matches_persisted: int = 0
    failures: int = 0
    cancelled: bool = False


@dataclass
class ReconciliationSummary:
    """
    Aggregate results from one batch reconciliation run.

    Attributes:
        direction: Which population drove the run
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        matches_created_or_updated: Pairs that cleared the threshold and were upserted
        candidates_processed: Eligible candidates covered by the run
        opportunities_processed: Active opportunities covered by the run
        candidates_skipped: Candidates excluded by status
        pairs_attempted: Pairs scored (including failed ones)
        failures: Pairs whose persistence raised
        skipped: Whether the run was skipped because another run was in progress
        cancelled: Whether the run stopped early on a cancel request
        error: Fatal error that stopped the run before pairs were attempted
        total_duration_seconds: Total time for the run
    """

    direction: Direction
    run_started_at: datetime
    run_finished_at: datetime
    matches_created_or_updated: int = 0
    candidates_processed: int = 0
    opportunities_processed: int = 0
    candidates_skipped: int = 0
    pairs_attempted: int = 0
    failures: int = 0
    skipped: bool = False
    cancelled: bool = False
    error: Optional[str] = None
    total_duration_seconds: float = 0.0

    def __post_init__(self):
        """Compute duration if not set."""
        if self.total_duration_seconds == 0.0:
            delta = self.run_finished_at - self.run_started_at
            self.total_duration_seconds = delta.total_seconds()

    @property
    def had_errors(self) -> bool:
        return self.failures > 0 or self.error is not None

    def as_dict(self) -> Dict[str, Any]:
        """Plain dict for logging and reports."""
        data = asdict(self)
        data["direction"] = self.direction.value
        data["run_started_at"] = format_timestamp_for_log(self.run_started_at)
        data["run_finished_at"] = format_timestamp_for_log(self.run_finished_at)
        data["had_errors"] = self.had_errors
        return data
