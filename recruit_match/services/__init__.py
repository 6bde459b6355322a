"""Application services built on the matching engine."""

from .matching import MatchingService, parse_status

__all__ = ["MatchingService", "parse_status"]
