"""Utility functions for text normalization and UTC timestamp handling."""

from .text import clean_optional_text, contains_either_way, normalize_text, parse_text_list
from .timestamps import (
    ensure_utc,
    format_for_storage,
    format_timestamp_for_log,
    parse_from_storage,
    utc_now,
)

__all__ = [
    # Text
    "normalize_text",
    "clean_optional_text",
    "parse_text_list",
    "contains_either_way",
    # Timestamps
    "utc_now",
    "ensure_utc",
    "format_for_storage",
    "parse_from_storage",
    "format_timestamp_for_log",
]
