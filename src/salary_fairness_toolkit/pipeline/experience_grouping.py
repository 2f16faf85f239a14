"""Experience buckets and the per-bucket salary summary.

Buckets are right-closed intervals over the breakpoints with the lowest edge
included, so with the default edges 0/2/5/10/20/40 a value of exactly 5 years
lands in "3–5" and 0 years lands in "0–2".
"""

from typing import Sequence

import pandas as pd

from ..config.config_parser import DEFAULT_BREAKPOINTS, DEFAULT_GROUP_LABELS
from ..exceptions import ExperienceRangeError

OUT_OF_RANGE_POLICIES = ("clamp", "reject")


def _bucket(
    years: pd.Series,
    breakpoints: Sequence[float],
    labels: Sequence[str],
    out_of_range: str,
) -> pd.Series:
    if out_of_range not in OUT_OF_RANGE_POLICIES:
        raise ValueError(
            f"Unknown out_of_range policy '{out_of_range}', "
            f"expected one of {OUT_OF_RANGE_POLICIES}"
        )
    if len(labels) != len(breakpoints) - 1:
        raise ValueError("labels must have exactly one entry per bucket")

    low, high = breakpoints[0], breakpoints[-1]
    outside = (years < low) | (years > high)
    if outside.any():
        if out_of_range == "reject":
            raise ExperienceRangeError(
                f"{int(outside.sum())} experience values outside [{low:g}, {high:g}]: "
                f"{sorted(years[outside].unique().tolist())[:10]}"
            )
        years = years.clip(lower=low, upper=high)

    return pd.cut(
        years,
        bins=list(breakpoints),
        labels=list(labels),
        right=True,
        include_lowest=True,
        ordered=True,
    )


def assign_experience_group(
    years: float,
    breakpoints: Sequence[float] = DEFAULT_BREAKPOINTS,
    labels: Sequence[str] = DEFAULT_GROUP_LABELS,
    out_of_range: str = "clamp",
) -> str:
    """Return the experience bucket label for a single value."""
    if pd.isna(years):
        raise ValueError("years_experience must not be missing")
    group = _bucket(pd.Series([float(years)]), breakpoints, labels, out_of_range)
    return str(group.iloc[0])


def add_experience_group(
    data: pd.DataFrame,
    breakpoints: Sequence[float] = DEFAULT_BREAKPOINTS,
    labels: Sequence[str] = DEFAULT_GROUP_LABELS,
    out_of_range: str = "clamp",
    column: str = "years_experience",
) -> pd.DataFrame:
    """Return a copy of ``data`` with an ordered ``experience_group`` column."""
    grouped = data.copy()
    grouped["experience_group"] = _bucket(
        grouped[column].astype(float), breakpoints, labels, out_of_range
    )
    return grouped


def summarize_by_experience(data: pd.DataFrame) -> pd.DataFrame:
    """Mean salary and row count per non-empty experience group, in bucket order."""
    if "experience_group" not in data.columns:
        raise ValueError("Data has no experience_group column; call add_experience_group first")

    return (
        data.groupby("experience_group", observed=True)
        .agg(avg_salary=("salary", "mean"), count=("salary", "size"))
        .reset_index()
    )
