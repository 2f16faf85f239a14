"""Pipeline stages: cleaning, experience grouping, splitting and encoding."""

from .cleaning import clean_salary_data, normalize_education_level
from .experience_grouping import (
    add_experience_group,
    assign_experience_group,
    summarize_by_experience,
)
from .splitting import DatasetSplit, split_and_filter
from .encoding import ReferenceLevelEncoder

__all__ = [
    "clean_salary_data",
    "normalize_education_level",
    "add_experience_group",
    "assign_experience_group",
    "summarize_by_experience",
    "DatasetSplit",
    "split_and_filter",
    "ReferenceLevelEncoder",
]
