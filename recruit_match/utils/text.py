"""Text helpers for comparing free-text recruitment fields.

Candidate and opportunity records have been stored by several backends over
time, so list-like fields may arrive as native lists, JSON text, or
comma-separated text. These helpers turn that input into clean Python values
once, at the edge, so scoring code only ever deals with plain strings.
"""

import json
import re
from typing import Any, Iterable, List, Optional


def normalize_text(value: Any) -> str:
    """Normalize a free-text value for comparison.

    Normalization steps:
    - Non-string input becomes an empty string
    - Convert to lowercase
    - Strip leading/trailing whitespace
    - Collapse internal whitespace

    Args:
        value: Value to normalize

    Returns:
        Normalized text ("" when there is nothing to compare)

    Example:
        >>> normalize_text("  Primary   School ")
        'primary school'
    """
    if not isinstance(value, str):
        return ""

    normalized = value.strip().lower()
    return re.sub(r"\s+", " ", normalized)


def clean_optional_text(value: Any) -> Optional[str]:
    """Trim a scalar text field, mapping blanks and unusable types to None.

    Numbers are kept as their string form since experience buckets are
    sometimes stored as bare integers.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return None

    stripped = value.strip()
    return stripped or None


def parse_text_list(value: Any) -> List[str]:
    """Parse a loosely typed list field into a list of trimmed strings.

    Accepted shapes, in order of precedence:
    - None or empty input: empty list
    - list, tuple, set or frozenset: string items are kept, others dropped
    - JSON array text such as '["Primary", "Middle School"]'
    - comma-separated text such as "Primary, Middle School"
    - a single plain value such as "Primary"

    A JSON string such as '"Shanghai"' counts as a single value. Other JSON
    that is not an array yields an empty list, as do unsupported types. Blank
    items are removed and duplicates are dropped while preserving first-seen
    order.

    Args:
        value: Raw field value

    Returns:
        List of non-empty strings

    Example:
        >>> parse_text_list('["English", "Math"]')
        ['English', 'Math']
        >>> parse_text_list("Shanghai, Beijing")
        ['Shanghai', 'Beijing']
    """
    if value is None:
        return []

    if isinstance(value, (list, tuple, set, frozenset)):
        items: Iterable[Any] = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        try:
            parsed = json.loads(text)
        except ValueError:
            items = text.split(",") if "," in text else [text]
        else:
            if isinstance(parsed, str):
                items = [parsed]
            elif isinstance(parsed, list):
                items = parsed
            else:
                return []
    else:
        return []

    result: List[str] = []
    for item in items:
        if not isinstance(item, str):
            continue
        stripped = item.strip()
        if stripped and stripped not in result:
            result.append(stripped)
    return result


def contains_either_way(left: str, right: str) -> bool:
    """Return True when one non-empty string contains the other.

    Empty strings never match, since "" is a substring of everything.
    """
    if not left or not right:
        return False
    return left in right or right in left
