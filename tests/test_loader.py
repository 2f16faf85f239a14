"""Unit tests for the CSV loader."""

import pytest
import pandas as pd

from salary_fairness_toolkit.data.loader import load_salary_data
from salary_fairness_toolkit.exceptions import DataLoadError

REQUIRED = ["Salary", "Years of Experience", "Job Title", "Education Level"]


class TestLoadSalaryData:
    """Test cases for load_salary_data."""

    def test_load_valid_file(self, salary_csv):
        """Test loading a CSV with all required columns."""
        data = load_salary_data(salary_csv, required_columns=REQUIRED)

        assert len(data) == 207
        assert set(REQUIRED).issubset(data.columns)
        assert pd.api.types.is_float_dtype(data["Salary"])
        assert pd.api.types.is_object_dtype(data["Job Title"]) or pd.api.types.is_string_dtype(
            data["Job Title"]
        )

    def test_extra_columns_kept(self, salary_csv):
        """Test that columns the analysis ignores are still loaded."""
        data = load_salary_data(salary_csv)
        assert "Age" in data.columns
        assert "Gender" in data.columns

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_salary_data(tmp_path / "missing.csv")

    def test_empty_file(self, tmp_path):
        """Test that an empty file raises DataLoadError."""
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")

        with pytest.raises(DataLoadError, match="empty"):
            load_salary_data(path)

    def test_malformed_file(self, tmp_path):
        """Test that a row with too many fields raises DataLoadError."""
        path = tmp_path / "malformed.csv"
        path.write_text("a,b\n1,2\n3,4,5,6\n", encoding="utf-8")

        with pytest.raises(DataLoadError, match="Could not parse"):
            load_salary_data(path)

    def test_missing_required_column(self, tmp_path):
        """Test that an absent required column is named in the error."""
        path = tmp_path / "partial.csv"
        path.write_text(
            "Salary,Years of Experience,Job Title\n50000,3,Data Analyst\n",
            encoding="utf-8",
        )

        with pytest.raises(DataLoadError, match="Education Level"):
            load_salary_data(path, required_columns=REQUIRED)

    def test_data_load_error_is_value_error(self, tmp_path):
        """Test that loader errors can be caught as ValueError."""
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")

        with pytest.raises(ValueError):
            load_salary_data(path)
