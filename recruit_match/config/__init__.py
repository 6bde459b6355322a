"""Configuration management module for Recruit Match."""

from .duration import DurationParseError, format_duration, parse_duration
from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config
from .models import (
    AdvancedConfig,
    AppConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    MatchingConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "MatchingConfig",
    "LoggingConfig",
    "AdvancedConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Durations
    "parse_duration",
    "format_duration",
    "DurationParseError",
    # Exceptions
    "ConfigurationError",
]
