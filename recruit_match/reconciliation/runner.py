"""Batch reconciliation across the whole candidate and opportunity populations."""

import contextvars
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence
from uuid import uuid4

from recruit_match.domain.models import Candidate
from recruit_match.logging import get_logger
from recruit_match.logging.context import log_context
from recruit_match.matching.engine import PairwiseMatcher
from recruit_match.matching.models import Direction
from recruit_match.persistence.contracts import CandidateReader, OpportunityReader
from recruit_match.utils.timestamps import utc_now

from .models import ReconciliationSummary, RowStats

logger = get_logger(__name__, component="reconciliation")

DEFAULT_EXCLUDED_STATUSES = ("inactive",)


class BatchReconciler:
    """
    Recomputes matches for every eligible candidate against every active opportunity.

    Either population can drive the run; the work done is the same cross-product.
    A failure on one pair is logged and counted and never stops the run.
    """

    def __init__(
        self,
        candidate_reader: CandidateReader,
        opportunity_reader: OpportunityReader,
        matcher: PairwiseMatcher,
        excluded_candidate_statuses: Iterable[str] = DEFAULT_EXCLUDED_STATUSES,
        max_workers: int = 1,
        cancel_event: Optional[threading.Event] = None,
    ):
        """
        Initialize the batch reconciler.

        Args:
            candidate_reader: Source of candidates
            opportunity_reader: Source of opportunities
            matcher: Pairwise matcher used for every pair
            excluded_candidate_statuses: Candidate statuses left out of batch runs
            max_workers: Rows processed in parallel (1 = sequential)
            cancel_event: Set to stop a run between pairs
        """
        self.candidate_reader = candidate_reader
        self.opportunity_reader = opportunity_reader
        self.matcher = matcher
        self.excluded_candidate_statuses = frozenset(
            s.strip().lower() for s in excluded_candidate_statuses
        )
        self.max_workers = max(1, max_workers)
        self.cancel_event = cancel_event or threading.Event()
        self._lock = threading.Lock()

    def run_for_all_candidates(
        self, persistence_threshold: Optional[int] = None
    ) -> ReconciliationSummary:
        """Reconcile with each eligible candidate driving a pass over all opportunities."""
        return self.run(Direction.CANDIDATE_TO_OPPORTUNITY, persistence_threshold)

    def run_for_all_opportunities(
        self, persistence_threshold: Optional[int] = None
    ) -> ReconciliationSummary:
        """Reconcile with each active opportunity driving a pass over all candidates."""
        return self.run(Direction.OPPORTUNITY_TO_CANDIDATE, persistence_threshold)

    def cancel(self) -> None:
        """Ask the running (or next) reconciliation to stop before its next pair."""
        self.cancel_event.set()

    def run(
        self,
        direction: Direction = Direction.CANDIDATE_TO_OPPORTUNITY,
        persistence_threshold: Optional[int] = None,
    ) -> ReconciliationSummary:
        """
        Execute one reconciliation run.

        This method:
        1. Acquires a lock so runs on this reconciler never overlap
        2. Fetches candidates and active opportunities once
        3. Drops candidates with an excluded status
        4. Runs the pairwise matcher on every pair, tolerating per-pair failures
        5. Returns the aggregate summary

        Args:
            direction: Which population drives the run
            persistence_threshold: Override for the matcher's threshold

        Returns:
            ReconciliationSummary for the run
        """
        direction = Direction(direction)
        run_started_at = utc_now()
        run_id = uuid4().hex

        if not self._lock.acquire(blocking=False):
            with log_context(run_id=run_id):
                logger.warning(
                    "Reconciliation run skipped: previous run still in progress",
                    extra={
                        "event": "reconcile.run.skipped",
                        "reason": "lock_held",
                    },
                )
            return ReconciliationSummary(
                direction=direction,
                run_started_at=run_started_at,
                run_finished_at=utc_now(),
                skipped=True,
            )

        try:
            with log_context(run_id=run_id, direction=direction.value):
                return self._run_locked(direction, persistence_threshold, run_started_at)
        finally:
            self.cancel_event.clear()
            self._lock.release()

    def _run_locked(
        self, direction: Direction, persistence_threshold: Optional[int], run_started_at
    ) -> ReconciliationSummary:
        try:
            candidates = self.candidate_reader.list_candidates()
            opportunities = self.opportunity_reader.list_opportunities(active_only=True)
        except Exception as e:
            logger.error(
                f"Reconciliation aborted: could not load records: {e}",
                extra={"event": "reconcile.run.failed", "error": str(e)},
                exc_info=True,
            )
            return ReconciliationSummary(
                direction=direction,
                run_started_at=run_started_at,
                run_finished_at=utc_now(),
                error=str(e),
            )

        eligible = [c for c in candidates if not self._is_excluded(c)]
        candidates_skipped = len(candidates) - len(eligible)

        logger.info(
            "Reconciliation run started",
            extra={
                "event": "reconcile.run.started",
                "candidate_count": len(eligible),
                "candidates_skipped": candidates_skipped,
                "opportunity_count": len(opportunities),
            },
        )

        if direction == Direction.CANDIDATE_TO_OPPORTUNITY:
            rows: Sequence = eligible
            others: Sequence = opportunities
        else:
            rows = opportunities
            others = eligible

        row_stats = self._process_rows(rows, others, direction, persistence_threshold)

        rows_processed = sum(1 for s in row_stats if s.pairs_attempted or not s.cancelled)
        if direction == Direction.CANDIDATE_TO_OPPORTUNITY:
            candidates_processed, opportunities_processed = rows_processed, len(opportunities)
        else:
            candidates_processed, opportunities_processed = len(eligible), rows_processed

        summary = ReconciliationSummary(
            direction=direction,
            run_started_at=run_started_at,
            run_finished_at=utc_now(),
            matches_created_or_updated=sum(s.matches_persisted for s in row_stats),
            candidates_processed=candidates_processed,
            opportunities_processed=opportunities_processed,
            candidates_skipped=candidates_skipped,
            pairs_attempted=sum(s.pairs_attempted for s in row_stats),
            failures=sum(s.failures for s in row_stats),
            cancelled=any(s.cancelled for s in row_stats),
        )

        logger.info(
            "Reconciliation run completed",
            extra={
                "event": "reconcile.run.completed",
                "duration_ms": int(summary.total_duration_seconds * 1000),
                "matches_created_or_updated": summary.matches_created_or_updated,
                "candidates_processed": summary.candidates_processed,
                "opportunities_processed": summary.opportunities_processed,
                "pairs_attempted": summary.pairs_attempted,
                "failures": summary.failures,
                "cancelled": summary.cancelled,
            },
        )
        return summary

    def _process_rows(
        self,
        rows: Sequence,
        others: Sequence,
        direction: Direction,
        persistence_threshold: Optional[int],
    ) -> List[RowStats]:
        if self.max_workers == 1 or len(rows) <= 1:
            return [self._process_row(row, others, direction, persistence_threshold) for row in rows]

        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="reconcile"
        ) as executor:
            futures = [
                executor.submit(
                    contextvars.copy_context().run,
                    self._process_row,
                    row,
                    others,
                    direction,
                    persistence_threshold,
                )
                for row in rows
            ]
            return [future.result() for future in futures]

    def _process_row(
        self,
        row,
        others: Sequence,
        direction: Direction,
        persistence_threshold: Optional[int],
    ) -> RowStats:
        """Match one candidate (or opportunity) against every record on the other side."""
        stats = RowStats()

        for other in others:
            if self.cancel_event.is_set():
                stats.cancelled = True
                logger.info(
                    "Reconciliation cancelled",
                    extra={"event": "reconcile.run.cancelled"},
                )
                break

            if direction == Direction.CANDIDATE_TO_OPPORTUNITY:
                candidate, opportunity = row, other
            else:
                candidate, opportunity = other, row

            stats.pairs_attempted += 1
            try:
                match = self.matcher.match_one(
                    candidate, opportunity, persistence_threshold, direction
                )
                if match is not None:
                    stats.matches_persisted += 1
            except Exception as e:
                stats.failures += 1
                logger.error(
                    f"Failed to reconcile candidate {candidate.id} / opportunity {opportunity.id}: {e}",
                    extra={
                        "event": "reconcile.pair.failed",
                        "candidate_id": candidate.id,
                        "opportunity_id": opportunity.id,
                        "error_type": type(e).__name__,
                        "error": str(e),
                    },
                    exc_info=True,
                )
                continue

        return stats

    def _is_excluded(self, candidate: Candidate) -> bool:
        return (candidate.status or "").lower() in self.excluded_candidate_statuses
