"""Text reports for the command line."""

from .templates import ReportRenderer, ReportRenderingError

__all__ = ["ReportRenderer", "ReportRenderingError"]
