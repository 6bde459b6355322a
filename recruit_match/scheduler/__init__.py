"""Scheduling for periodic batch reconciliation."""

from .service import JOB_ID, ReconcileScheduler

__all__ = ["JOB_ID", "ReconcileScheduler"]
