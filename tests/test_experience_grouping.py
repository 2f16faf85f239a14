"""Unit tests for experience bucketing and the salary summary."""

import numpy as np
import pandas as pd
import pytest

from salary_fairness_toolkit.config import DEFAULT_GROUP_LABELS
from salary_fairness_toolkit.exceptions import ExperienceRangeError
from salary_fairness_toolkit.pipeline.experience_grouping import (
    add_experience_group,
    assign_experience_group,
    summarize_by_experience,
)


class TestAssignExperienceGroup:
    """Test cases for assign_experience_group."""

    @pytest.mark.parametrize(
        "years,expected",
        [
            (0, "0–2"),
            (1.5, "0–2"),
            (2, "0–2"),
            (2.5, "3–5"),
            (5, "3–5"),
            (6, "6–10"),
            (10, "6–10"),
            (11, "11–20"),
            (20, "11–20"),
            (21, "20+"),
            (40, "20+"),
        ],
    )
    def test_bucket_boundaries(self, years, expected):
        """Test that breakpoints belong to the lower bucket and 0 to the first."""
        assert assign_experience_group(years) == expected

    def test_above_range_clamped(self):
        """Test that values above the last breakpoint go to the top bucket."""
        assert assign_experience_group(55) == "20+"

    def test_above_range_rejected(self):
        """Test the reject policy for out-of-range values."""
        with pytest.raises(ExperienceRangeError):
            assign_experience_group(55, out_of_range="reject")

    def test_missing_value(self):
        """Test that a missing value raises ValueError."""
        with pytest.raises(ValueError):
            assign_experience_group(np.nan)

    def test_unknown_policy(self):
        """Test that an unknown out-of-range policy is refused."""
        with pytest.raises(ValueError, match="out_of_range"):
            assign_experience_group(3, out_of_range="ignore")

    def test_custom_breakpoints(self):
        """Test bucketing with user supplied edges and labels."""
        assert assign_experience_group(4, breakpoints=[0, 5, 50], labels=["junior", "senior"]) == "junior"
        assert assign_experience_group(6, breakpoints=[0, 5, 50], labels=["junior", "senior"]) == "senior"


class TestAddExperienceGroup:
    """Test cases for add_experience_group and summarize_by_experience."""

    def test_every_row_grouped(self, cleaned_salary_data):
        """Test that grouping is total on cleaned data and keeps the input intact."""
        grouped = add_experience_group(cleaned_salary_data)

        assert "experience_group" not in cleaned_salary_data.columns
        assert grouped["experience_group"].notna().all()
        assert list(grouped["experience_group"].cat.categories) == DEFAULT_GROUP_LABELS
        assert grouped["experience_group"].cat.ordered
        pd.testing.assert_index_equal(grouped.index, cleaned_salary_data.index)

    def test_deterministic(self, cleaned_salary_data):
        """Test that grouping the same data twice gives the same labels."""
        first = add_experience_group(cleaned_salary_data)["experience_group"]
        second = add_experience_group(cleaned_salary_data)["experience_group"]
        pd.testing.assert_series_equal(first, second)

    def test_reject_policy_on_frame(self):
        """Test that the reject policy reports every offending value."""
        data = pd.DataFrame({"years_experience": [3.0, 45.0, 60.0], "salary": [1.0, 2.0, 3.0]})
        with pytest.raises(ExperienceRangeError, match="2 experience values"):
            add_experience_group(data, out_of_range="reject")

    def test_summary(self):
        """Test the mean salary and count per non-empty bucket."""
        data = add_experience_group(
            pd.DataFrame(
                {
                    "years_experience": [1.0, 2.0, 4.0, 25.0],
                    "salary": [40000.0, 50000.0, 60000.0, 150000.0],
                }
            )
        )
        summary = summarize_by_experience(data)

        assert list(summary["experience_group"].astype(str)) == ["0–2", "3–5", "20+"]
        assert list(summary["avg_salary"]) == [45000.0, 60000.0, 150000.0]
        assert list(summary["count"]) == [2, 1, 1]

    def test_summary_requires_groups(self, cleaned_salary_data):
        """Test that the summary needs the experience_group column."""
        with pytest.raises(ValueError, match="experience_group"):
            summarize_by_experience(cleaned_salary_data)
