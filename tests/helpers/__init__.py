"""Test helper utilities for Recruit Match tests."""

from .factories import make_candidate, make_opportunity
from .memory_store import (
    InMemoryCandidateReader,
    InMemoryMatchStore,
    InMemoryOpportunityReader,
    TickingClock,
)

__all__ = [
    "InMemoryCandidateReader",
    "InMemoryMatchStore",
    "InMemoryOpportunityReader",
    "TickingClock",
    "make_candidate",
    "make_opportunity",
]
