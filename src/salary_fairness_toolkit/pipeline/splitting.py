"""Seeded train/test split and the minimum sample size rule for job titles.

Job titles are filtered on training counts only and the same title set is then
applied to both splits, so a title can never survive in the test set without
also having enough training rows to estimate its coefficient.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

import pandas as pd
from sklearn.model_selection import train_test_split


@dataclass
class DatasetSplit:
    """Train and test tables after the job title filter.

    ``job_title_counts`` holds the training counts of every title before
    filtering, which is what the frequency report shows.
    """

    train: pd.DataFrame
    test: pd.DataFrame
    job_title_counts: pd.DataFrame
    valid_job_titles: List[str]
    min_job_title_count: int
    dropped_train_rows: int = 0
    dropped_test_rows: int = 0
    summary: dict = field(default_factory=dict)


def split_train_test(
    data: pd.DataFrame, train_fraction: float = 0.8, random_state: int = 123
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Draw ``floor(train_fraction * n)`` rows without replacement for training.

    The remaining rows form the test set. Both keep the input's index, so the
    two index sets are disjoint and together cover ``data``.
    """
    if not 0.0 < train_fraction < 1.0:
        raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")

    train, test = train_test_split(
        data, train_size=train_fraction, random_state=random_state, shuffle=True
    )
    return train.copy(), test.copy()


def count_job_titles(train: pd.DataFrame) -> pd.DataFrame:
    """Training rows per job title, most frequent first (ties by title)."""
    counts = train["job_title"].value_counts().rename_axis("job_title").reset_index(
        name="count"
    )
    return counts.sort_values(
        ["count", "job_title"], ascending=[False, True], ignore_index=True
    )


def valid_job_titles(counts: pd.DataFrame, min_count: int = 30) -> List[str]:
    """Titles whose training count reaches ``min_count``."""
    return counts.loc[counts["count"] >= min_count, "job_title"].tolist()


def filter_job_titles(data: pd.DataFrame, valid_titles: Iterable[str]) -> pd.DataFrame:
    """Keep only rows whose job title is in ``valid_titles``."""
    return data[data["job_title"].isin(list(valid_titles))].copy()


def split_and_filter(
    data: pd.DataFrame,
    train_fraction: float = 0.8,
    random_state: int = 123,
    min_job_title_count: int = 30,
) -> DatasetSplit:
    """Split the cleaned data and apply the job title rule to both halves."""
    train, test = split_train_test(data, train_fraction, random_state)

    counts = count_job_titles(train)
    valid = valid_job_titles(counts, min_job_title_count)

    filtered_train = filter_job_titles(train, valid)
    filtered_test = filter_job_titles(test, valid)

    return DatasetSplit(
        train=filtered_train,
        test=filtered_test,
        job_title_counts=counts,
        valid_job_titles=valid,
        min_job_title_count=min_job_title_count,
        dropped_train_rows=len(train) - len(filtered_train),
        dropped_test_rows=len(test) - len(filtered_test),
        summary={
            "train_rows_before_filter": len(train),
            "test_rows_before_filter": len(test),
            "train_rows": len(filtered_train),
            "test_rows": len(filtered_test),
            "job_titles_total": len(counts),
            "job_titles_kept": len(valid),
        },
    )
