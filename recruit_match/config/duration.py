"""Duration parsing for the reconcile interval setting."""

import re

_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}

_ISO_PATTERN = re.compile(
    r"^P(?:(?P<d>\d+)D)?(?:T(?:(?P<h>\d+)H)?(?:(?P<m>\d+)M)?(?:(?P<s>\d+(?:\.\d+)?)S)?)?$"
)
_HUMAN_PART = re.compile(r"(\d+)([smhd])")


class DurationParseError(ValueError):
    """Raised when a duration string cannot be parsed."""

    pass


def parse_duration(duration_str: str) -> int:
    """
    Parse a duration string to seconds.

    Accepts short forms ("30m", "1h", "2d", "1h30m") and ISO-8601 durations
    ("PT30M", "PT1H", "P1D").

    Raises:
        DurationParseError: If the duration string is invalid or zero

    Examples:
        >>> parse_duration("1h30m")
        5400
        >>> parse_duration("P1DT2H")
        93600
    """
    if not isinstance(duration_str, str) or not duration_str.strip():
        raise DurationParseError("Duration string cannot be empty")

    text = duration_str.strip()
    if text.upper().startswith("P"):
        total = _parse_iso(text)
    else:
        total = _parse_short(text)

    if total == 0:
        raise DurationParseError(f"Duration cannot be zero: '{duration_str}'")
    return total


def _parse_iso(text: str) -> int:
    match = _ISO_PATTERN.match(text.upper())
    if not match or text.upper() in ("P", "PT"):
        raise DurationParseError(
            f"Invalid ISO-8601 duration format: '{text}'. "
            "Expected format like 'P1D', 'PT1H30M' or 'PT45M'"
        )
    parts = match.groupdict()
    total = 0
    for unit in ("d", "h", "m"):
        if parts[unit]:
            total += int(parts[unit]) * _UNIT_SECONDS[unit]
    if parts["s"]:
        total += int(float(parts["s"]))
    return total


def _parse_short(text: str) -> int:
    compact = re.sub(r"\s+", "", text.lower())
    parts = _HUMAN_PART.findall(compact)
    if not parts or "".join(n + u for n, u in parts) != compact:
        raise DurationParseError(
            f"Invalid duration format: '{text}'. "
            "Use digits followed by s, m, h or d, e.g. '45m', '6h', '1h30m'"
        )
    return sum(int(n) * _UNIT_SECONDS[u] for n, u in parts)


def validate_duration_range(
    duration_seconds: int, min_seconds: int = 300, max_seconds: int = 604800
) -> None:
    """
    Check that a reconcile interval lies within [min_seconds, max_seconds].

    Raises:
        DurationParseError: If the duration is out of range
    """
    if duration_seconds < min_seconds:
        raise DurationParseError(
            f"Reconcile interval too short: {format_duration(duration_seconds)}. "
            f"Minimum is {format_duration(min_seconds)}."
        )
    if duration_seconds > max_seconds:
        raise DurationParseError(
            f"Reconcile interval too long: {format_duration(duration_seconds)}. "
            f"Maximum is {format_duration(max_seconds)}."
        )


def format_duration(seconds: int) -> str:
    """Render seconds in the largest whole unit, e.g. "2 hours"."""
    for unit, name in ((86400, "day"), (3600, "hour"), (60, "minute")):
        if seconds >= unit:
            count = seconds // unit
            return f"{count} {name}{'s' if count != 1 else ''}"
    return f"{seconds} second{'s' if seconds != 1 else ''}"
