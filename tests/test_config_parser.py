"""Unit tests for configuration parser."""

import pytest
import tempfile
import yaml
from pathlib import Path

from salary_fairness_toolkit.config import (
    ConfigParser,
    PipelineConfig,
    VisualizationConfig,
    DEFAULT_BREAKPOINTS,
    DEFAULT_GROUP_LABELS,
)


class TestConfigParser:
    """Test cases for ConfigParser class."""

    @pytest.fixture
    def valid_config_dict(self):
        """Return a valid configuration dictionary."""
        return {
            "data": {
                "input_path": "salary_data.csv",
                "columns": {
                    "salary": "Salary",
                    "years_experience": "Years of Experience",
                    "job_title": "Job Title",
                    "education_level": "Education Level",
                },
                "train_fraction": 0.8,
                "random_state": 123,
            },
            "filtering": {"min_job_title_count": 30},
            "grouping": {
                "breakpoints": [0, 2, 5, 10, 20, 40],
                "labels": ["0–2", "3–5", "6–10", "11–20", "20+"],
                "out_of_range": "clamp",
            },
            "reporting": {"output_dir": "output", "sample_rows": 6},
            "tracking": {
                "enabled": False,
                "experiment_name": "test_experiment",
                "run_name": None,
                "log_model": True,
                "tags": {"framework": "test"},
            },
        }

    @pytest.fixture
    def valid_config_file(self, valid_config_dict):
        """Create a temporary valid config file."""
        with tempfile.NamedTemporaryFile(
            mode="w", suffix=".yml", delete=False, encoding="utf-8"
        ) as f:
            yaml.dump(valid_config_dict, f, allow_unicode=True)
            return Path(f.name)

    def test_load_valid_config(self, valid_config_file, valid_config_dict):
        """Test loading a valid configuration file."""
        config = ConfigParser.load(valid_config_file)
        assert config == valid_config_dict

    def test_load_nonexistent_file(self):
        """Test loading a non-existent configuration file."""
        with pytest.raises(FileNotFoundError):
            ConfigParser.load("nonexistent_file.yml")

    def test_load_invalid_yaml(self, tmp_path):
        """Test that malformed YAML is reported as a ValueError."""
        path = tmp_path / "broken.yml"
        path.write_text("data: [unclosed\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            ConfigParser.load(path)

    def test_load_empty_file(self, tmp_path):
        """Test that an empty file is rejected."""
        path = tmp_path / "empty.yml"
        path.write_text("", encoding="utf-8")

        with pytest.raises(ValueError, match="Empty"):
            ConfigParser.load(path)

    def test_load_non_mapping(self, tmp_path):
        """Test that a YAML list is rejected."""
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ValueError, match="dictionary"):
            ConfigParser.load(path)

    def test_load_system_path_rejected(self):
        """Test that configuration files under system directories are refused."""
        with pytest.raises(ValueError, match="unsafe"):
            ConfigParser.load("/etc/passwd")

    def test_load_suspicious_value_rejected(self, tmp_path, valid_config_dict):
        """Test that path traversal in a value is rejected on load."""
        valid_config_dict["data"]["input_path"] = "../../secrets.csv"
        path = tmp_path / "traversal.yml"
        path.write_text(yaml.dump(valid_config_dict, allow_unicode=True), encoding="utf-8")

        with pytest.raises(ValueError, match="Suspicious file path"):
            ConfigParser.load(path)

    def test_validate_valid_config(self, valid_config_dict):
        """Test validation of a valid configuration."""
        errors = ConfigParser.validate(valid_config_dict)
        assert errors == []

    def test_validate_missing_data_section(self):
        """Test validation with the data section missing."""
        errors = ConfigParser.validate({"filtering": {"min_job_title_count": 30}})
        assert any("data" in error and "Field required" in error for error in errors)

    def test_validate_missing_input_path(self, valid_config_dict):
        """Test validation with missing data fields."""
        del valid_config_dict["data"]["input_path"]

        errors = ConfigParser.validate(valid_config_dict)
        assert any("data.input_path" in error for error in errors)

    def test_minimal_config_uses_defaults(self):
        """Test that only the data section is required."""
        config = ConfigParser.parse({"data": {"input_path": "salary_data.csv"}})

        assert isinstance(config, PipelineConfig)
        assert config.data.train_fraction == 0.8
        assert config.data.random_state == 123
        assert config.filtering.min_job_title_count == 30
        assert config.grouping.breakpoints == DEFAULT_BREAKPOINTS
        assert config.grouping.labels == DEFAULT_GROUP_LABELS
        assert config.grouping.out_of_range == "clamp"
        assert config.reporting.output_dir is None
        assert config.tracking.enabled is False
        assert config.visualization is None

    def test_column_mapping(self, valid_config_dict):
        """Test that custom CSV headers map onto the internal field names."""
        valid_config_dict["data"]["columns"]["salary"] = "Annual Pay"
        config = ConfigParser.parse(valid_config_dict)

        mapping = config.data.columns.as_dict()
        assert mapping["Annual Pay"] == "salary"
        assert mapping["Job Title"] == "job_title"
        assert set(mapping.values()) == {
            "salary",
            "years_experience",
            "job_title",
            "education_level",
        }

    def test_parse_returns_existing_config_unchanged(self, valid_config_dict):
        """Test that an already parsed config passes through."""
        config = ConfigParser.parse(valid_config_dict)
        assert ConfigParser.parse(config) is config

    @pytest.mark.parametrize("fraction", [0.0, 1.0, 1.5, -0.2])
    def test_validate_invalid_train_fraction(self, valid_config_dict, fraction):
        """Test validation with a train fraction outside (0, 1)."""
        valid_config_dict["data"]["train_fraction"] = fraction

        errors = ConfigParser.validate(valid_config_dict)
        assert any("data.train_fraction" in error for error in errors)

    def test_validate_invalid_min_job_title_count(self, valid_config_dict):
        """Test validation with a non-positive job title threshold."""
        valid_config_dict["filtering"]["min_job_title_count"] = 0

        errors = ConfigParser.validate(valid_config_dict)
        assert any("filtering.min_job_title_count" in error for error in errors)

    def test_validate_non_increasing_breakpoints(self, valid_config_dict):
        """Test validation with breakpoints that are not strictly increasing."""
        valid_config_dict["grouping"]["breakpoints"] = [0, 5, 5, 10, 20, 40]

        errors = ConfigParser.validate(valid_config_dict)
        assert any("strictly increasing" in error for error in errors)

    def test_validate_label_count_mismatch(self, valid_config_dict):
        """Test validation with the wrong number of bucket labels."""
        valid_config_dict["grouping"]["labels"] = ["low", "high"]

        errors = ConfigParser.validate(valid_config_dict)
        assert any("Expected 5 labels" in error for error in errors)

    def test_validate_invalid_out_of_range_policy(self, valid_config_dict):
        """Test validation with an unknown out-of-range policy."""
        valid_config_dict["grouping"]["out_of_range"] = "ignore"

        errors = ConfigParser.validate(valid_config_dict)
        assert any("grouping.out_of_range" in error for error in errors)

    def test_validate_invalid_experiment_name(self, valid_config_dict):
        """Test validation with invalid experiment name."""
        valid_config_dict["tracking"]["experiment_name"] = "bad/name"

        errors = ConfigParser.validate(valid_config_dict)
        assert any("invalid characters" in error for error in errors)

    def test_validate_suspicious_path(self, valid_config_dict):
        """Test that validation reports a path traversal attempt."""
        valid_config_dict["reporting"]["output_dir"] = "../../outside"

        errors = ConfigParser.validate(valid_config_dict)
        assert len(errors) == 1
        assert "Suspicious file path" in errors[0]

    def test_validate_invalid_color(self, valid_config_dict):
        """Test validation with a malformed hex colour."""
        valid_config_dict["visualization"] = {"colors": {"primary": "blue"}}

        errors = ConfigParser.validate(valid_config_dict)
        assert any("visualization.colors.primary" in error for error in errors)


class TestVisualizationConfig:
    """Test cases for pyproject-based visualization defaults."""

    def test_defaults_when_file_missing(self, tmp_path):
        """Test that a missing pyproject.toml yields the defaults."""
        config = VisualizationConfig.from_pyproject(tmp_path / "pyproject.toml")
        assert config == VisualizationConfig()
        assert config.export.default_format == "html"

    def test_reads_dotted_keys(self, tmp_path):
        """Test reading flattened keys from the tool table."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            "[tool.salary_fairness_toolkit.visualization]\n"
            '"colors.primary" = "#123456"\n'
            '"layout.height" = 600\n'
            '"export.default_format" = "svg"\n',
            encoding="utf-8",
        )

        config = VisualizationConfig.from_pyproject(pyproject)

        assert config.colors.primary == "#123456"
        assert config.layout.height == 600
        assert config.export.default_format == "svg"
        assert config.colors.accent == VisualizationConfig().colors.accent

    def test_invalid_table_falls_back_to_defaults(self, tmp_path):
        """Test that an invalid tool table leaves the defaults in place."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            "[tool.salary_fairness_toolkit.visualization]\n"
            '"layout.height" = 5\n',
            encoding="utf-8",
        )

        assert VisualizationConfig.from_pyproject(pyproject) == VisualizationConfig()
