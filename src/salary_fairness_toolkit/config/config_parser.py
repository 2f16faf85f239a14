"""Configuration parsing and validation utilities for the salary fairness pipeline.

This module contains Pydantic models for configuration and a parser that
performs several validation steps.
These steps include schema validation
using Pydantic models (shape, types, ranges), safety checks on file paths,
and limits that keep the analysis statistically meaningful.

Only the ``data`` section is mandatory; every other section falls back to the
standard salary analysis settings (seed 123, 80/20 split, minimum of 30
training rows per job title, experience breakpoints 0/2/5/10/20/40).
"""

import yaml
import re
from pathlib import Path
from typing import Dict, Any, Union, List, Optional, Literal
from pydantic import BaseModel, Field, field_validator, model_validator, ValidationError
import tomllib


DEFAULT_BREAKPOINTS = [0.0, 2.0, 5.0, 10.0, 20.0, 40.0]
DEFAULT_GROUP_LABELS = ["0–2", "3–5", "6–10", "11–20", "20+"]


class ColumnMappingConfig(BaseModel):
    """Header names of the required fields in the input CSV.

    Attributes:
      salary (str): Column holding the annual salary.
      years_experience (str): Column holding years of professional experience.
      job_title (str): Column holding the job title.
      education_level (str): Column holding the highest education level.
    """

    salary: str = Field("Salary", min_length=1)
    years_experience: str = Field("Years of Experience", min_length=1)
    job_title: str = Field("Job Title", min_length=1)
    education_level: str = Field("Education Level", min_length=1)

    def as_dict(self) -> Dict[str, str]:
        """Return the mapping from CSV header to internal column name."""
        return {
            self.salary: "salary",
            self.years_experience: "years_experience",
            self.job_title: "job_title",
            self.education_level: "education_level",
        }


class DataConfig(BaseModel):
    """Dataset and split configuration.

    Defines the configuration for loading data and creating a reproducible
    train/test split.

    Attributes:
      input_path (str): Path to the input CSV file.
      columns (ColumnMappingConfig): CSV header for each required field.
      train_fraction (float): Share of cleaned rows drawn into the training set.
      random_state (int): Seed for the train/test sampling.
    """

    input_path: str = Field(..., min_length=1, description="Path to input CSV file")
    columns: ColumnMappingConfig = Field(default_factory=ColumnMappingConfig)
    train_fraction: float = Field(
        0.8, gt=0.0, lt=1.0, description="Training set proportion"
    )
    random_state: int = Field(123, description="Random seed")


class FilteringConfig(BaseModel):
    """Job title sample-size rule.

    Attributes:
      min_job_title_count (int): Minimum number of training rows a job title
        needs to keep its own coefficient.
    """

    min_job_title_count: int = Field(30, ge=1, le=100000)


class GroupingConfig(BaseModel):
    """Experience bucketing.

    Attributes:
      breakpoints (List[float]): Strictly increasing bucket edges.
      labels (List[str]): One label per bucket.
      out_of_range (str): ``clamp`` assigns values beyond the edges to the
        nearest end bucket, ``reject`` raises an error.
    """

    breakpoints: List[float] = Field(
        default_factory=lambda: list(DEFAULT_BREAKPOINTS), min_length=2, max_length=50
    )
    labels: List[str] = Field(default_factory=lambda: list(DEFAULT_GROUP_LABELS))
    out_of_range: Literal["clamp", "reject"] = "clamp"

    @field_validator("breakpoints")
    def validate_breakpoints(cls, v):
        """Reject breakpoints that are not strictly increasing."""
        if any(b <= a for a, b in zip(v, v[1:])):
            raise ValueError("breakpoints must be strictly increasing")
        return v

    @model_validator(mode="after")
    def validate_label_count(self):
        """Require exactly one label per bucket."""
        if len(self.labels) != len(self.breakpoints) - 1:
            raise ValueError(
                f"Expected {len(self.breakpoints) - 1} labels for "
                f"{len(self.breakpoints)} breakpoints, got {len(self.labels)}"
            )
        return self


class ReportingConfig(BaseModel):
    """Console and file output.

    Attributes:
      output_dir (Optional[str]): Directory for saved plots and predictions.
        Nothing is written when unset.
      save_plots (bool): Export figures to ``output_dir``.
      save_predictions (bool): Write the classified test set as CSV.
      sample_rows (int): Example rows shown per fairness status.
      histogram_bins (int): Bin count of the pay gap histogram.
    """

    output_dir: Optional[str] = Field(None, description="Output directory")
    save_plots: bool = True
    save_predictions: bool = True
    sample_rows: int = Field(6, ge=0, le=100)
    histogram_bins: int = Field(40, ge=5, le=200)


class TrackingConfig(BaseModel):
    """MLflow tracking configuration.

    Naming rules guard against path-like or shell-unfriendly names in tracking
    systems.

    Attributes:
      enabled (bool): Log the run to MLflow.
      experiment_name (str): MLflow experiment name
        (max 200 chars, restricted characters).
      run_name (Optional[str]): Optional run name to distinguish runs.
      tracking_uri (Optional[str]): Tracking server or store. Defaults to a
        local ``mlruns`` directory.
      log_model (bool): Whether to log the fitted regression model.
      tags (Dict[str, str]): Tags to attach to the MLflow run.
    """

    enabled: bool = False
    experiment_name: str = Field(
        "salary_fairness", max_length=200, description="MLflow experiment name"
    )
    run_name: Optional[str] = Field(None, description="MLflow run name")
    tracking_uri: Optional[str] = Field(None, description="MLflow tracking URI")
    log_model: bool = Field(True, description="Whether to log model")
    tags: Dict[str, str] = Field(default_factory=dict, description="MLflow tags")

    @field_validator("experiment_name")
    def validate_experiment_name(cls, v):
        """Validate experiment name against disallowed characters.

        Raises:
          ValueError:
          If the name contains characters that are unsafe in
            common filesystems or UIs.
        """
        if re.search(r'[<>:"/\\|?*]', v):
            raise ValueError("experiment_name contains invalid characters")
        return v


class VisualizationColorsConfig(BaseModel):
    """Color palette settings.

    Hex color constraints ensure valid rendering and consistent visuals across
    plots. ``underpaid``, ``fairly_paid`` and ``overpaid`` colour the fairness
    statuses.
    """

    primary: str = Field("#4682B4", pattern=r"^#[0-9A-Fa-f]{6}$")
    accent: str = Field("#ADD8E6", pattern=r"^#[0-9A-Fa-f]{6}$")
    reference: str = Field("#1A1E21", pattern=r"^#[0-9A-Fa-f]{6}$")
    threshold: str = Field("#D30B3B", pattern=r"^#[0-9A-Fa-f]{6}$")
    underpaid: str = Field("#F8766D", pattern=r"^#[0-9A-Fa-f]{6}$")
    fairly_paid: str = Field("#00BA38", pattern=r"^#[0-9A-Fa-f]{6}$")
    overpaid: str = Field("#619CFF", pattern=r"^#[0-9A-Fa-f]{6}$")


class VisualizationFontsConfig(BaseModel):
    """Font configuration for plot text.

    Attributes:
      family (str): CSS font-family stack used in plots.
      title_size (int): Title font size in points.
      axis_size (int): Axis label font size in points.
    """

    family: str = Field("Arial, sans-serif", description="Font family")
    title_size: int = Field(20, ge=12, le=48, description="Title font size")
    axis_size: int = Field(14, ge=8, le=24, description="Axis font size")


class VisualizationLayoutConfig(BaseModel):
    """Layout configuration for plots.

    Attributes:
      height (int): Default plot height in pixels.
      width (int): Default plot width in pixels.
      margins (Dict[str, int]): Plot margins in Plotly format
        (l, r, t, b, pad).
    """

    height: int = Field(550, ge=200, le=1200, description="Default plot height")
    width: int = Field(900, ge=300, le=2400, description="Default plot width")
    margins: Dict[str, int] = Field(
        default_factory=lambda: {"l": 70, "r": 40, "t": 90, "b": 70, "pad": 10},
        description="Plot margins (Plotly format: l, r, t, b, pad)",
    )


class VisualizationExportConfig(BaseModel):
    """Static export settings.

    ``html`` needs nothing beyond Plotly; image formats go through Kaleido.
    """

    default_format: Literal["html", "png", "svg", "pdf"] = "html"
    width: int = Field(1200, ge=300, le=4000)
    height: int = Field(800, ge=200, le=4000)
    scale: float = Field(2.0, gt=0, le=5)


class VisualizationConfig(BaseModel):
    """High-level visualization configuration.

    This aggregates color, font, layout and export defaults. The from_pyproject
    helper allows centralizing visualization preferences in pyproject.toml.
    """

    theme: str = Field("default", description="Visualization theme")
    colors: VisualizationColorsConfig = Field(default_factory=VisualizationColorsConfig)
    fonts: VisualizationFontsConfig = Field(default_factory=VisualizationFontsConfig)
    layout: VisualizationLayoutConfig = Field(default_factory=VisualizationLayoutConfig)
    export: VisualizationExportConfig = Field(default_factory=VisualizationExportConfig)

    @classmethod
    def from_pyproject(
        cls, pyproject_path: Optional[Path] = None
    ) -> "VisualizationConfig":
        """Load visualization settings from a pyproject.toml.

        The method searches upward from the current working directory for the
        closest pyproject.toml.
        If found, it reads settings under:
        [tool.salary_fairness_toolkit.visualization].

        Args:
          pyproject_path (Optional[Path]): Optional explicit path to
            pyproject.toml.
            If not provided, a parent search is performed.

        Returns:
          VisualizationConfig:
          A configuration instance populated from the file,
          or defaults if none found or parsing fails.
        """
        if pyproject_path is None:
            current_dir = Path.cwd()
            for parent in [current_dir] + list(current_dir.parents):
                candidate = parent / "pyproject.toml"
                if candidate.exists():
                    pyproject_path = candidate
                    break

        if pyproject_path and pyproject_path.exists():
            try:
                with open(pyproject_path, "rb") as f:
                    config_data = tomllib.load(f)

                viz_config = (
                    config_data.get("tool", {})
                    .get("salary_fairness_toolkit", {})
                    .get("visualization", {})
                )

                if viz_config:
                    return cls._from_pyproject_dict(viz_config)
            except (IOError, tomllib.TOMLDecodeError, ValidationError):
                # Styling is optional; an unreadable table leaves the defaults.
                pass

        return cls()

    @classmethod
    def _from_pyproject_dict(cls, data: Dict[str, Any]) -> "VisualizationConfig":
        """Create a VisualizationConfig from a possibly flattened TOML dict.

        The pyproject configuration may use dotted keys (e.g.,
        colors.primary = "#123456"), which are expanded before validation.
        """
        nested: Dict[str, Any] = {}
        for key, value in data.items():
            parts = key.split(".")
            current = nested
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = value

        return cls(**nested)


class PipelineConfig(BaseModel):
    """Top-level pipeline configuration.

    This model stitches together all pipeline sections into a single validated
    object, enabling end-to-end validation in one pass before execution.
    ``visualization`` stays None when the YAML omits it so that the executor
    can fall back to pyproject.toml styling.
    """

    data: DataConfig
    filtering: FilteringConfig = Field(default_factory=FilteringConfig)
    grouping: GroupingConfig = Field(default_factory=GroupingConfig)
    reporting: ReportingConfig = Field(default_factory=ReportingConfig)
    tracking: TrackingConfig = Field(default_factory=TrackingConfig)
    visualization: Optional[VisualizationConfig] = None


class ConfigParser:
    """Parse and validate pipeline configuration safely.

    This class provides a YAML loader with additional safety and resource
    checks so that unreadable files or suspicious paths fail before any
    pipeline stage runs.
    """

    MAX_CONFIG_BYTES = 10 * 1024 * 1024

    @staticmethod
    def load(config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load and check a YAML configuration file.

        Args:
          config_path (Union[str, Path]):
          Path to the YAML configuration file.

        Raises:
          ValueError: If the path is unsafe, the file is too large, the YAML is
            invalid or not a mapping, or a value fails the safety checks.
          FileNotFoundError: If the path does not exist.

        Returns:
          Dict[str, Any]: The parsed configuration dictionary.
        """
        config_path = Path(config_path)

        try:
            config_path = config_path.resolve()
        except (OSError, RuntimeError) as e:
            raise ValueError(f"Invalid configuration path: {e}")

        if not ConfigParser._is_safe_path(config_path):
            raise ValueError(f"Potentially unsafe configuration path: {config_path}")

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        file_size = config_path.stat().st_size
        if file_size > ConfigParser.MAX_CONFIG_BYTES:
            raise ValueError(
                f"Configuration file too large: {file_size} bytes (max 10MB)"
            )

        try:
            with open(config_path, "r", encoding="utf-8") as file:
                config = yaml.safe_load(file)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except UnicodeDecodeError as e:
            raise ValueError(f"Configuration file encoding error: {e}")

        if config is None:
            raise ValueError("Empty or invalid YAML configuration file")

        if not isinstance(config, dict):
            raise ValueError("Configuration must be a YAML dictionary")

        ConfigParser._check_file_paths(config)

        return config

    @staticmethod
    def _is_safe_path(path: Path) -> bool:
        """Return whether a resolved path lies outside system locations."""
        dangerous_prefixes = ["/etc", "/proc", "/sys", "/dev", "/boot", "/sbin"]

        path_str = str(path).lower()
        if any(path_str.startswith(prefix) for prefix in dangerous_prefixes):
            return False

        suspicious_patterns = [r"\.ssh/", r"\.aws/", r"\.gnupg/"]
        return not any(re.search(pattern, path_str) for pattern in suspicious_patterns)

    @staticmethod
    def _check_file_paths(config: Dict[str, Any], path: str = "") -> None:
        """Recursively reject string values that point at sensitive locations.

        Args:
          config (Dict[str, Any]): Configuration subtree to validate.
          path (str): Dot-delimited path used for error context.

        Raises:
          ValueError: If an unsafe path is detected.
        """
        dangerous_patterns = [
            r"/etc/passwd",
            r"/etc/shadow",
            r"\.\./",
            r"\\\.\\\.\\",
            r"^/proc/",
            r"^/sys/",
            r"^/dev/",
            r"~/\.ssh",
            r"~/\.aws",
            r"ftp://",
            r"sftp://",
        ]

        for key, value in config.items():
            current_path = f"{path}.{key}" if path else str(key)

            if isinstance(value, dict):
                ConfigParser._check_file_paths(value, current_path)
            elif isinstance(value, str):
                value_lower = value.lower()
                for pattern in dangerous_patterns:
                    if re.search(pattern, value_lower):
                        raise ValueError(
                            f"Suspicious file path detected in {current_path}: {value}"
                        )

    @staticmethod
    def parse(config: Union[Dict[str, Any], PipelineConfig]) -> PipelineConfig:
        """Build a typed PipelineConfig, raising on invalid content."""
        if isinstance(config, PipelineConfig):
            return config
        ConfigParser._check_file_paths(config)
        return PipelineConfig(**config)

    @staticmethod
    def validate(config: Dict[str, Any]) -> list[str]:
        """Validate a configuration dict against the schema and safety rules.

        Returns:
          list[str]: An empty list if valid,
          or a list of human-readable error
          messages describing validation failures.
        """
        try:
            ConfigParser.parse(config)
            return []
        except ValidationError as e:
            return [
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors()
            ]
        except Exception as e:
            return [f"Validation error: {str(e)}"]
