"""Exceptions raised by the salary fairness pipeline."""

from typing import Iterable


class DataLoadError(ValueError):
    """Raised when the input table cannot be parsed or lacks required columns."""


class UnseenCategoryError(ValueError):
    """Raised when a categorical value falls outside the trained level set."""

    def __init__(self, column: str, levels: Iterable):
        self.column = column
        self.levels = sorted(str(level) for level in levels)
        super().__init__(
            f"Unseen levels in '{column}' not present in training data: {self.levels}"
        )


class ExperienceRangeError(ValueError):
    """Raised when years of experience fall outside the grouping breakpoints."""
