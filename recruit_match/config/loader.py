"""Configuration loader for Recruit Match."""

from pathlib import Path
from typing import List, Optional, Tuple

import yaml
from pydantic import ValidationError

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .models import AppConfig
from .validators import check_for_warnings, emit_warnings

DEFAULT_CONFIG_LOCATIONS = (Path("config.yaml"), Path("config") / "config.yaml")


def load_config(config_path: Optional[Path] = None) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load and validate configuration from YAML file and environment variables.

    Config file lookup order:
    1. config_path, if given
    2. config.yaml in the current directory
    3. config/config.yaml

    Args:
        config_path: Optional path to configuration file

    Returns:
        Tuple of (AppConfig, EnvironmentConfig)

    Raises:
        ConfigurationError: If configuration is invalid or file not found
    """
    config_file = _find_config_file(config_path)

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse YAML configuration: {e}",
            suggestions=[
                "Check YAML syntax in your config file",
                "Ensure proper indentation (use spaces, not tabs)",
            ],
        )
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read configuration file: {e}",
            suggestions=[f"Ensure {config_file} exists and is readable"],
        )

    if not config_dict:
        raise ConfigurationError(
            "Configuration file is empty",
            suggestions=[
                "Copy config.example.yaml to config.yaml",
                "Add at least a 'matching' section to your config file",
            ],
        )

    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            "Configuration file must contain a mapping at the top level",
            suggestions=["Review config.example.yaml for the expected layout"],
        )

    warnings = check_for_warnings(config_dict)
    if warnings:
        emit_warnings(warnings)

    try:
        app_config = AppConfig.model_validate(config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            "Configuration validation failed",
            errors=_format_validation_errors(e),
            suggestions=[
                "Review config.example.yaml for correct format",
                "Verify field types match the expected schema",
            ],
        )

    env_config = load_environment_config()
    return app_config, env_config


def _format_validation_errors(error: ValidationError) -> List[str]:
    """Turn pydantic errors into one readable line each."""
    messages = []
    for item in error.errors():
        field_path = " -> ".join(str(loc) for loc in item["loc"])
        error_type = item["type"]

        if error_type == "missing":
            messages.append(f"Missing required field: {field_path}")
        elif error_type in ("string_type", "int_type", "int_parsing", "bool_type", "list_type"):
            expected = error_type.split("_", 1)[0]
            messages.append(
                f"Invalid type for '{field_path}': expected {expected}, got {item.get('input')!r}"
            )
        elif "enum" in error_type:
            messages.append(f"Invalid value for '{field_path}': {item['msg']}")
        else:
            messages.append(f"{field_path}: {item['msg']}" if field_path else item["msg"])
    return messages


def _find_config_file(config_path: Optional[Path] = None) -> Path:
    """
    Find configuration file using fallback logic.

    Raises:
        ConfigurationError: If no config file is found
    """
    if config_path:
        if not config_path.exists():
            raise ConfigurationError(
                f"Specified configuration file not found: {config_path}",
                suggestions=[f"Ensure {config_path} exists", "Check the path and try again"],
            )
        return config_path

    for candidate in DEFAULT_CONFIG_LOCATIONS:
        if candidate.exists():
            return candidate

    raise ConfigurationError(
        "Configuration file not found",
        errors=[f"Tried: {location}" for location in DEFAULT_CONFIG_LOCATIONS],
        suggestions=[
            "Copy config.example.yaml to config.yaml",
            "Use --config flag to specify a custom location",
        ],
    )
