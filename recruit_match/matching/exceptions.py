"""Exceptions raised by the matching layer."""


class MatchingError(Exception):
    """Base exception for matching errors."""

    pass


class InvalidStatusError(MatchingError, ValueError):
    """Raised when a match status string is not a known workflow status."""

    def __init__(self, status: str, allowed=None):
        self.status = status
        self.allowed = list(allowed or [])
        message = f"Invalid match status: {status!r}"
        if self.allowed:
            message += f" (expected one of: {', '.join(self.allowed)})"
        super().__init__(message)
