"""Custom exceptions for configuration management."""

from typing import List, Optional


class ConfigurationError(Exception):
    """
    Raised when the config file or environment cannot be turned into settings.

    Carries the individual problems and hints for fixing them; str() renders
    all of them so the CLI can print the exception as-is.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.errors = list(errors or [])
        self.suggestions = list(suggestions or [])
        super().__init__(self.render())

    def render(self) -> str:
        """Message followed by numbered errors and bulleted suggestions."""
        lines = [self.message]
        if self.errors:
            lines.append("\nValidation Errors:")
            lines.extend(f"  {i}. {error}" for i, error in enumerate(self.errors, 1))
        if self.suggestions:
            lines.append("\nSuggestions:")
            lines.extend(f"  - {suggestion}" for suggestion in self.suggestions)
        return "\n".join(lines)
