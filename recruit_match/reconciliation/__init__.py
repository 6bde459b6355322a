"""Batch reconciliation of matches across the full populations."""

from .models import ReconciliationSummary, RowStats
from .runner import DEFAULT_EXCLUDED_STATUSES, BatchReconciler

__all__ = [
    "BatchReconciler",
    "DEFAULT_EXCLUDED_STATUSES",
    "ReconciliationSummary",
    "RowStats",
]
