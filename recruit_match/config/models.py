"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from recruit_match.matching.models import WEIGHT_PRESETS, Direction, WeightTable

from .duration import DurationParseError, parse_duration, validate_duration_range


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class MatchingConfig(BaseModel):
    """Scoring and persistence rules for the matching engine."""

    persistence_threshold: int = Field(
        40,
        ge=0,
        le=101,
        description="Minimum score for a pair to be stored (101 stores nothing)",
    )
    weights: WeightTable = Field(
        default_factory=WeightTable.canonical,
        description="Weight table, or the name of a preset (canonical, school_legacy)",
    )
    excluded_candidate_statuses: List[str] = Field(
        default_factory=lambda: ["inactive"],
        description="Candidate statuses left out of batch reconciliation",
    )
    default_direction: Direction = Field(
        Direction.CANDIDATE_TO_OPPORTUNITY,
        description="Population that drives batch runs (candidates or opportunities)",
    )

    @field_validator("weights", mode="before")
    @classmethod
    def resolve_preset(cls, v: Any) -> Any:
        """Allow a preset name in place of a full table."""
        if isinstance(v, str):
            name = v.strip().lower()
            if name not in WEIGHT_PRESETS:
                raise ValueError(
                    f"Unknown weight preset '{v}'. Available: {', '.join(sorted(WEIGHT_PRESETS))}"
                )
            return WEIGHT_PRESETS[name].model_copy()
        return v

    @field_validator("excluded_candidate_statuses")
    @classmethod
    def normalize_statuses(cls, v: List[str]) -> List[str]:
        """Lower-case and strip statuses, dropping blanks and duplicates."""
        normalized = []
        for status in v:
            stripped = status.strip().lower()
            if stripped and stripped not in normalized:
                normalized.append(stripped)
        return normalized


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AdvancedConfig(BaseModel):
    """Advanced runtime settings."""

    max_workers: int = Field(
        1, ge=1, le=32, description="Rows reconciled in parallel (1 = sequential)"
    )


class AppConfig(BaseModel):
    """Root configuration object for Recruit Match."""

    matching: MatchingConfig = Field(
        default_factory=MatchingConfig, description="Scoring and persistence rules"
    )
    reconcile_interval: str = Field(
        "1h", description="How often daemon mode reruns batch reconciliation"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    advanced: AdvancedConfig = Field(
        default_factory=AdvancedConfig, description="Advanced runtime settings"
    )

    # Computed field
    reconcile_interval_seconds: Optional[int] = None

    @field_validator("reconcile_interval")
    @classmethod
    def validate_reconcile_interval(cls, v: str) -> str:
        """Validate the interval parses and lies between 5 minutes and 7 days."""
        try:
            seconds = parse_duration(v)
            validate_duration_range(seconds, min_seconds=300, max_seconds=604800)
            return v
        except DurationParseError as e:
            raise ValueError(str(e)) from e

    @model_validator(mode="after")
    def compute_fields(self):
        """Compute reconcile_interval_seconds."""
        self.reconcile_interval_seconds = parse_duration(self.reconcile_interval)
        return self
