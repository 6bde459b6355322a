"""Non-fatal configuration checks."""

import warnings
from typing import Any, Dict, List

from pydantic import ValidationError

from recruit_match.matching.models import WEIGHT_PRESETS, WeightTable


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for settings that are valid but probably unintended.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    matching = config_dict.get("matching") or {}
    if not isinstance(matching, dict):
        return warning_messages

    weights = _weights_from_raw(matching.get("weights"))
    if weights is not None and weights.max_score > 100:
        warning_messages.append(
            f"Weights add up to {weights.max_score}; scores above 100 will be clamped"
        )

    threshold = matching.get("persistence_threshold", 40)
    if isinstance(threshold, int) and not isinstance(threshold, bool):
        if threshold == 0:
            warning_messages.append(
                "persistence_threshold is 0; every scored pair will be stored"
            )
        elif weights is not None and threshold > min(weights.max_score, 100):
            warning_messages.append(
                f"persistence_threshold ({threshold}) is above the highest achievable "
                f"score ({min(weights.max_score, 100)}); no matches will be stored"
            )

    excluded = matching.get("excluded_candidate_statuses")
    if isinstance(excluded, list) and not excluded:
        warning_messages.append(
            "excluded_candidate_statuses is empty; inactive candidates will be matched"
        )

    return warning_messages


def _weights_from_raw(raw: Any):
    if raw is None:
        return WeightTable.canonical()
    if isinstance(raw, str):
        return WEIGHT_PRESETS.get(raw.strip().lower())
    try:
        return WeightTable.model_validate(raw)
    except ValidationError:
        # Reported by full validation
        return None


def emit_warnings(warning_messages: List[str]) -> None:
    """
    Emit warning messages using Python's warnings module.

    Args:
        warning_messages: List of warning messages to emit
    """
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
