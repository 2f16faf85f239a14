"""Column selection, row validity rules and education label normalisation."""

from typing import Any, Dict, Optional

import pandas as pd

DEFAULT_COLUMN_MAP = {
    "Salary": "salary",
    "Years of Experience": "years_experience",
    "Job Title": "job_title",
    "Education Level": "education_level",
}

REQUIRED_FIELDS = ["salary", "years_experience", "job_title", "education_level"]
NUMERIC_FIELDS = ["salary", "years_experience"]
TEXT_FIELDS = ["job_title", "education_level"]

CANONICAL_EDUCATION_LEVELS = ["High School", "Bachelor's", "Master's", "PhD"]

# Keys are casefolded.
EDUCATION_ALIASES = {
    "high school": "High School",
    "bachelor's": "Bachelor's",
    "bachelor's degree": "Bachelor's",
    "master's": "Master's",
    "master's degree": "Master's",
    "phd": "PhD",
}


def normalize_education_level(value: Any) -> Any:
    """Map an education label to its canonical spelling.

    Known aliases ("high school", "Bachelor's Degree", "Master's Degree",
    "phD", "PHD", ...) are matched case-insensitively after stripping
    whitespace. Anything else, including missing values, is returned unchanged.
    """
    if not isinstance(value, str):
        return value
    return EDUCATION_ALIASES.get(value.strip().casefold(), value)


def clean_salary_data(
    raw: pd.DataFrame, column_map: Optional[Dict[str, str]] = None
) -> pd.DataFrame:
    """Produce the analysis table from the raw survey table.

    Selects and renames the four required fields, drops rows with a missing
    field, a non-positive salary or negative experience, and normalises the
    education labels. The raw row index is kept.

    Args:
        raw: Table as read from the CSV file.
        column_map: CSV header -> internal field name. Defaults to the survey's
            headers.

    Raises:
        ValueError: If a mapped column is absent from ``raw``.
    """
    column_map = column_map or DEFAULT_COLUMN_MAP

    missing = [col for col in column_map if col not in raw.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    data = raw[list(column_map)].rename(columns=column_map).copy()

    for col in NUMERIC_FIELDS:
        data[col] = pd.to_numeric(data[col], errors="coerce")

    for col in TEXT_FIELDS:
        text = data[col].astype("string").str.strip()
        blank = (text == "").fillna(False).astype(bool)
        data[col] = text.mask(blank).astype(object)

    valid = (
        data[REQUIRED_FIELDS].notna().all(axis=1)
        & (data["salary"] > 0)
        & (data["years_experience"] >= 0)
    )
    data = data.loc[valid, REQUIRED_FIELDS].copy()

    data["salary"] = data["salary"].astype(float)
    data["years_experience"] = data["years_experience"].astype(float)
    data["job_title"] = data["job_title"].astype(str)
    data["education_level"] = data["education_level"].map(normalize_education_level)

    return data
