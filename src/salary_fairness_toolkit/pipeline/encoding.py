"""Reference-level (treatment) encoding learned from the training split.

The encoder is the explicit contract between training and prediction: it
records the level set of every categorical column seen during ``fit`` and
refuses to encode values outside it instead of silently producing all-zero
indicator rows.
"""

from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin

from ..exceptions import UnseenCategoryError


def level_sort_key(level) -> Tuple[str, str]:
    """Collation key for category levels: casefolded text, then exact text."""
    text = str(level)
    return text.casefold(), text


class ReferenceLevelEncoder(BaseEstimator, TransformerMixin):
    """Expands categorical columns into indicators for all but the first level.

    Levels are sorted case-insensitively (ties by exact spelling), and the
    first one becomes the baseline absorbed by the model intercept. Numeric
    columns are passed through as floats.
    """

    def __init__(
        self,
        numeric_features: Optional[list] = None,
        categorical_features: Optional[list] = None,
    ):
        self.numeric_features = numeric_features or []
        self.categorical_features = categorical_features or []
        self.is_fitted_ = False
        self.levels_: Dict[str, List] = {}
        self.reference_levels_: Dict[str, object] = {}
        self.feature_names_: List[str] = []

    def _validate_input(self, X: pd.DataFrame) -> None:
        """Validate input data format and required columns."""
        if not isinstance(X, pd.DataFrame):
            raise TypeError("Input must be a pandas DataFrame")

        required = list(self.numeric_features) + list(self.categorical_features)
        missing_features = [col for col in required if col not in X.columns]
        if missing_features:
            raise ValueError(f"Missing features: {missing_features}")

    def _check_is_fitted(self) -> None:
        """Check if encoder has been fitted."""
        if not self.is_fitted_:
            raise ValueError("Encoder must be fitted before transforming data")

    @staticmethod
    def indicator_name(column: str, level) -> str:
        return f"{column}[T.{level}]"

    def fit(self, X: pd.DataFrame, y: Optional[pd.Series] = None) -> "ReferenceLevelEncoder":
        """Learn the sorted level set of every categorical column."""
        self._validate_input(X)
        if len(X) == 0:
            raise ValueError("Cannot fit encoder on an empty table")

        self.levels_ = {}
        self.reference_levels_ = {}
        for col in self.categorical_features:
            if X[col].isna().any():
                raise ValueError(f"Categorical feature '{col}' contains missing values")
            levels = sorted(X[col].unique().tolist(), key=level_sort_key)
            self.levels_[col] = levels
            self.reference_levels_[col] = levels[0]

        self.feature_names_ = list(self.numeric_features) + [
            self.indicator_name(col, level)
            for col in self.categorical_features
            for level in self.levels_[col][1:]
        ]
        self.is_fitted_ = True
        return self

    def transform(self, X: pd.DataFrame) -> pd.DataFrame:
        """Build the design matrix (without intercept column).

        Raises:
            UnseenCategoryError: If a categorical value was not seen in fit.
        """
        self._check_is_fitted()
        self._validate_input(X)

        for col in self.categorical_features:
            known = set(self.levels_[col])
            unseen = [value for value in X[col].unique() if value not in known]
            if unseen:
                raise UnseenCategoryError(col, unseen)

        columns = {
            col: pd.to_numeric(X[col], errors="raise").astype(float)
            for col in self.numeric_features
        }
        for col in self.categorical_features:
            values = X[col].to_numpy()
            for level in self.levels_[col][1:]:
                columns[self.indicator_name(col, level)] = (values == level).astype(np.float64)

        return pd.DataFrame(columns, index=X.index, columns=self.feature_names_)

    def get_feature_names_out(self, input_features=None) -> np.ndarray:
        self._check_is_fitted()
        return np.asarray(self.feature_names_, dtype=object)

    def get_encoding_details(self) -> Dict[str, object]:
        """Level sets and baselines, for reports and run tracking."""
        self._check_is_fitted()
        return {
            "numeric_features": list(self.numeric_features),
            "categorical_features": list(self.categorical_features),
            "levels": {col: list(levels) for col, levels in self.levels_.items()},
            "reference_levels": dict(self.reference_levels_),
            "n_features": len(self.feature_names_),
        }
