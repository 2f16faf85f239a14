"""Shared fixtures for the salary fairness test suite."""

import pytest

from salary_fairness_toolkit.data.synthetic import generate_salary_data
from salary_fairness_toolkit.pipeline.cleaning import clean_salary_data
from salary_fairness_toolkit.pipeline.experience_grouping import add_experience_group


@pytest.fixture
def raw_salary_data():
    """200 valid synthetic survey rows with the survey's headers."""
    return generate_salary_data(n_samples=200, random_state=42)


@pytest.fixture
def cleaned_salary_data(raw_salary_data):
    """Synthetic rows after cleaning."""
    return clean_salary_data(raw_salary_data)


@pytest.fixture
def grouped_salary_data(cleaned_salary_data):
    """Cleaned rows with the experience_group column."""
    return add_experience_group(cleaned_salary_data)


@pytest.fixture
def salary_csv(tmp_path):
    """Synthetic survey written to CSV, including rows cleaning must drop."""
    path = tmp_path / "salary_data.csv"
    generate_salary_data(n_samples=200, random_state=42, dirty_rows=7).to_csv(
        path, index=False
    )
    return path
