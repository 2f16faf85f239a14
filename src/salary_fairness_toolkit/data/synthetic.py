"""Synthetic salary data with a known generating formula.

The generated frame uses the same headers as the real salary survey so it can
be written to CSV and fed through the whole pipeline. Salaries follow

    salary = BASE_SALARY
             + SALARY_PER_YEAR * years_experience
             + JOB_TITLE_PREMIUMS[job_title]
             + EDUCATION_PREMIUMS[education_level]
             + Normal(0, noise_std)

The zero-premium title and education level sort first alphabetically, so they
are also the regression's reference levels and BASE_SALARY is the intercept.
"""

from typing import Optional

import numpy as np
import pandas as pd

BASE_SALARY = 40000.0
SALARY_PER_YEAR = 3000.0

JOB_TITLE_PREMIUMS = {
    "Data Analyst": 0.0,
    "Data Scientist": 12000.0,
    "Software Engineer": 18000.0,
}
JOB_TITLE_WEIGHTS = [0.32, 0.32, 0.32]

# Appears too rarely to clear the minimum job title count.
RARE_JOB_TITLE = "Chief Happiness Officer"
RARE_JOB_TITLE_PREMIUM = 50000.0
RARE_JOB_TITLE_WEIGHT = 0.04

EDUCATION_PREMIUMS = {
    "Bachelor's": 0.0,
    "High School": -8000.0,
    "Master's": 7000.0,
    "PhD": 15000.0,
}
EDUCATION_WEIGHTS = [0.40, 0.15, 0.30, 0.15]

EDUCATION_ALIASES = {
    "Bachelor's": "Bachelor's Degree",
    "High School": "high school",
    "Master's": "Master's Degree",
    "PhD": "phD",
}

MAX_YEARS = 30


def generate_salary_data(
    n_samples: int = 200,
    random_state: Optional[int] = 42,
    noise_std: float = 5000.0,
    alias_fraction: float = 0.2,
    dirty_rows: int = 0,
    include_rare_title: bool = True,
) -> pd.DataFrame:
    """Create a CSV-shaped salary table.

    Args:
        n_samples: Number of valid rows.
        random_state: Seed for reproducibility.
        noise_std: Standard deviation of the Gaussian salary noise.
        alias_fraction: Share of valid rows whose education label is replaced
            by a documented alias (e.g. ``"Master's Degree"``).
        dirty_rows: Extra invalid rows appended after the valid ones; cleaning
            must drop all of them.
        include_rare_title: Mix in a job title that is too rare to model.

    Returns:
        DataFrame with ``Salary``, ``Years of Experience``, ``Job Title``,
        ``Education Level``, plus ``Age`` and ``Gender`` columns the analysis
        ignores.
    """
    rng = np.random.default_rng(random_state)

    titles = list(JOB_TITLE_PREMIUMS)
    title_weights = list(JOB_TITLE_WEIGHTS)
    premiums = dict(JOB_TITLE_PREMIUMS)
    if include_rare_title:
        titles.append(RARE_JOB_TITLE)
        title_weights.append(RARE_JOB_TITLE_WEIGHT)
        premiums[RARE_JOB_TITLE] = RARE_JOB_TITLE_PREMIUM
    title_weights = np.array(title_weights) / np.sum(title_weights)

    years = rng.integers(0, MAX_YEARS + 1, size=n_samples).astype(float)
    job_title = rng.choice(titles, size=n_samples, p=title_weights)
    education = rng.choice(
        list(EDUCATION_PREMIUMS), size=n_samples, p=EDUCATION_WEIGHTS
    )

    salary = (
        BASE_SALARY
        + SALARY_PER_YEAR * years
        + np.array([premiums[t] for t in job_title])
        + np.array([EDUCATION_PREMIUMS[e] for e in education])
        + rng.normal(0.0, noise_std, size=n_samples)
    )

    education_labels = education.astype(object)
    alias_mask = rng.random(n_samples) < alias_fraction
    education_labels[alias_mask] = [
        EDUCATION_ALIASES[label] for label in education[alias_mask]
    ]

    data = pd.DataFrame(
        {
            "Age": (22 + years + rng.integers(0, 6, size=n_samples)).astype(float),
            "Gender": rng.choice(["Male", "Female"], size=n_samples),
            "Education Level": education_labels,
            "Job Title": job_title,
            "Years of Experience": years,
            "Salary": salary.round(0),
        }
    )

    if dirty_rows > 0:
        data = pd.concat([data, _dirty_rows(dirty_rows, rng)], ignore_index=True)

    return data


def _dirty_rows(n_rows: int, rng: np.random.Generator) -> pd.DataFrame:
    """Rows that each break exactly one cleaning rule."""
    templates = [
        {"Salary": np.nan},
        {"Salary": 0.0},
        {"Salary": -1000.0},
        {"Years of Experience": np.nan},
        {"Years of Experience": -2.0},
        {"Job Title": np.nan},
        {"Education Level": np.nan},
    ]
    rows = []
    for i in range(n_rows):
        row = {
            "Age": 30.0,
            "Gender": "Female",
            "Education Level": "Bachelor's",
            "Job Title": "Data Analyst",
            "Years of Experience": float(rng.integers(0, MAX_YEARS + 1)),
            "Salary": 60000.0,
        }
        row.update(templates[i % len(templates)])
        rows.append(row)
    return pd.DataFrame(rows)
