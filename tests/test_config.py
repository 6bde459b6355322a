"""Integration tests for configuration module."""

from pathlib import Path

import pytest

from recruit_match.config import ConfigurationError, load_config
from recruit_match.config.duration import (
    DurationParseError,
    format_duration,
    parse_duration,
    validate_duration_range,
)
from recruit_match.config.environment import DEFAULT_DATABASE_URL, load_environment_config
from recruit_match.config.models import AppConfig, MatchingConfig
from recruit_match.config.validators import check_for_warnings
from recruit_match.matching import Direction

# Test fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def clean_env(monkeypatch):
    """Remove environment variables the loader reads."""
    for name in ("DATABASE_URL", "LOG_LEVEL", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)


class TestConfigurationLoading:
    """Test configuration loading from YAML files."""

    def test_load_valid_config(self, clean_env):
        """Test loading a valid configuration file."""
        app_config, env_config = load_config(FIXTURES_DIR / "valid_config.yaml")

        matching = app_config.matching
        assert matching.persistence_threshold == 50
        assert matching.weights.location_partial == 25
        assert matching.excluded_candidate_statuses == ["inactive", "withdrawn"]
        assert matching.default_direction == Direction.OPPORTUNITY_TO_CANDIDATE

        assert app_config.reconcile_interval_seconds == 7200
        assert app_config.logging.level == "DEBUG"
        assert app_config.logging.format == "json"
        assert app_config.advanced.max_workers == 4

        assert env_config.database_url == DEFAULT_DATABASE_URL
        assert env_config.log_level is None
        assert env_config.environment == "development"

    def test_load_minimal_config(self, clean_env):
        """Test that omitted sections fall back to defaults."""
        app_config, _ = load_config(FIXTURES_DIR / "minimal_config.yaml")

        assert app_config.matching.weights.max_score == 100
        assert app_config.matching.excluded_candidate_statuses == ["inactive"]
        assert app_config.matching.default_direction == Direction.CANDIDATE_TO_OPPORTUNITY
        assert app_config.reconcile_interval_seconds == 3600
        assert app_config.advanced.max_workers == 1

    def test_weight_preset_by_name(self, tmp_path, clean_env):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("matching:\n  weights: school_legacy\n")

        app_config, _ = load_config(config_file)

        assert app_config.matching.weights.experience == 10
        assert app_config.matching.weights.level == 25

    def test_config_file_not_found(self, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(Path("/nonexistent/config.yaml"))
        assert "not found" in str(exc_info.value)

    def test_default_locations_searched(self, tmp_path, monkeypatch, clean_env):
        """Test that config/config.yaml is used when no path is given."""
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "config.yaml").write_text("matching:\n  persistence_threshold: 70\n")
        monkeypatch.chdir(tmp_path)

        app_config, _ = load_config()

        assert app_config.matching.persistence_threshold == 70

    def test_no_config_anywhere(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigurationError) as exc_info:
            load_config()
        assert exc_info.value.errors

    def test_invalid_yaml_syntax(self, tmp_path, clean_env):
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("matching:\n  weights: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Failed to parse YAML"):
            load_config(config_file)

    def test_empty_file(self, tmp_path, clean_env):
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        with pytest.raises(ConfigurationError, match="empty"):
            load_config(config_file)

    def test_non_mapping_file(self, tmp_path, clean_env):
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- one\n- two\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(config_file)


class TestConfigurationValidation:
    """Test configuration validation rules."""

    def _load(self, tmp_path, body):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(body)
        return load_config(config_file)

    def test_threshold_out_of_range(self, tmp_path, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            self._load(tmp_path, "matching:\n  persistence_threshold: 150\n")
        assert any("persistence_threshold" in e for e in exc_info.value.errors)

    def test_threshold_101_allowed(self, tmp_path, clean_env):
        with pytest.warns(UserWarning, match="no matches will be stored"):
            app_config, _ = self._load(tmp_path, "matching:\n  persistence_threshold: 101\n")
        assert app_config.matching.persistence_threshold == 101

    def test_unknown_weight_preset(self, tmp_path, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            self._load(tmp_path, "matching:\n  weights: generous\n")
        assert any("Unknown weight preset" in e for e in exc_info.value.errors)

    def test_partial_weight_above_full(self, tmp_path, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            self._load(tmp_path, "matching:\n  weights:\n    level: 10\n    level_flexible: 20\n")
        assert any("level_flexible" in e for e in exc_info.value.errors)

    def test_invalid_direction(self, tmp_path, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            self._load(tmp_path, "matching:\n  default_direction: sideways\n")
        assert any("default_direction" in e for e in exc_info.value.errors)

    def test_reconcile_interval_too_short(self, tmp_path, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            self._load(tmp_path, 'reconcile_interval: "1m"\n')
        assert any("too short" in e for e in exc_info.value.errors)

    def test_max_workers_bounds(self, tmp_path, clean_env):
        with pytest.raises(ConfigurationError):
            self._load(tmp_path, "advanced:\n  max_workers: 0\n")

    def test_error_rendering_includes_suggestions(self):
        error = ConfigurationError("Bad", errors=["first"], suggestions=["try this"])
        rendered = str(error)
        assert "1. first" in rendered
        assert "- try this" in rendered


class TestConfigurationWarnings:
    """Test non-fatal configuration warnings."""

    def test_no_warnings_for_defaults(self):
        assert check_for_warnings({"matching": {}}) == []

    def test_weights_over_100(self):
        warnings = check_for_warnings({"matching": {"weights": {"experience": 20}}})
        assert any("120" in w for w in warnings)

    def test_zero_threshold(self):
        warnings = check_for_warnings({"matching": {"persistence_threshold": 0}})
        assert any("every scored pair" in w for w in warnings)

    def test_empty_exclusions(self):
        warnings = check_for_warnings({"matching": {"excluded_candidate_statuses": []}})
        assert any("inactive candidates" in w for w in warnings)

    def test_invalid_weights_left_to_validation(self):
        assert check_for_warnings({"matching": {"weights": {"level": -5}}}) == []


class TestModels:
    """Test configuration models directly."""

    def test_status_normalization(self):
        config = MatchingConfig(excluded_candidate_statuses=[" Inactive", "inactive", "", "Hold"])
        assert config.excluded_candidate_statuses == ["inactive", "hold"]

    def test_app_config_defaults(self):
        config = AppConfig()
        assert config.matching.persistence_threshold == 40
        assert config.reconcile_interval_seconds == 3600


class TestDurationParsing:
    """Test duration string parsing."""

    @pytest.mark.parametrize(
        "text,seconds",
        [
            ("30m", 1800),
            ("1h", 3600),
            ("45s", 45),
            ("2d", 172800),
            ("1h30m", 5400),
            ("PT30M", 1800),
            ("PT1H", 3600),
            ("PT1H30M", 5400),
            ("P1D", 86400),
            ("P1DT2H", 93600),
        ],
    )
    def test_parse(self, text, seconds):
        assert parse_duration(text) == seconds

    @pytest.mark.parametrize("text", ["invalid", "10x", "PT", "1h 30", "P1H"])
    def test_parse_invalid_format(self, text):
        with pytest.raises(DurationParseError):
            parse_duration(text)

    def test_parse_empty_string(self):
        with pytest.raises(DurationParseError, match="empty"):
            parse_duration("")

    def test_parse_zero(self):
        with pytest.raises(DurationParseError, match="zero"):
            parse_duration("0m")

    def test_validate_duration_range_too_short(self):
        with pytest.raises(DurationParseError, match="too short"):
            validate_duration_range(60)

    def test_validate_duration_range_too_long(self):
        with pytest.raises(DurationParseError, match="too long"):
            validate_duration_range(8 * 86400)

    def test_validate_duration_range_valid(self):
        validate_duration_range(3600)

    def test_format_duration(self):
        assert format_duration(7200) == "2 hours"
        assert format_duration(60) == "1 minute"
        assert format_duration(5) == "5 seconds"


class TestEnvironmentVariables:
    """Test environment variable loading."""

    def test_defaults(self, clean_env):
        env_config = load_environment_config()
        assert env_config.database_url == DEFAULT_DATABASE_URL
        assert env_config.log_level is None

    def test_values_from_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg://app:pw@db/recruit")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("ENVIRONMENT", "staging")

        env_config = load_environment_config()

        assert env_config.database_url == "postgresql+psycopg://app:pw@db/recruit"
        assert env_config.log_level == "DEBUG"
        assert env_config.environment == "staging"

    def test_unsupported_database(self, monkeypatch, clean_env):
        monkeypatch.setenv("DATABASE_URL", "mysql://app@db/recruit")
        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()
        assert any("mysql" in e for e in exc_info.value.errors)

    def test_malformed_database_url(self, monkeypatch, clean_env):
        monkeypatch.setenv("DATABASE_URL", "not a url")
        with pytest.raises(ConfigurationError):
            load_environment_config()

    def test_invalid_log_level(self, monkeypatch, clean_env):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()
        assert any("LOG_LEVEL" in e for e in exc_info.value.errors)
