"""Ordinary least squares model of expected salary.

Fits ``salary ~ years_experience + job_title + education_level`` with
reference-level dummies for the categorical predictors. Coefficient inference
(standard errors, t values, p values) follows the classical OLS formulas so the
fitted model can be read the same way as a statistics package summary.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.linear_model import LinearRegression

from ..pipeline.encoding import ReferenceLevelEncoder

INTERCEPT_TERM = "(Intercept)"


class SalaryRegressionModel(BaseEstimator, RegressorMixin):
    """Multiple linear regression with an explicit encoding scheme.

    The encoder is fitted on the training rows only; prediction reuses it, so a
    job title or education level that was not present during training raises
    ``UnseenCategoryError`` rather than being scored as the reference level.
    """

    def __init__(
        self,
        numeric_features: Sequence[str] = ("years_experience",),
        categorical_features: Sequence[str] = ("job_title", "education_level"),
    ):
        self.numeric_features = numeric_features
        self.categorical_features = categorical_features

    def _check_is_fitted(self) -> None:
        if not getattr(self, "is_fitted_", False):
            raise ValueError("Model must be fitted before making predictions")

    def fit(self, X: pd.DataFrame, y: pd.Series) -> "SalaryRegressionModel":
        """Fit the encoding scheme and the least squares coefficients."""
        if not isinstance(X, pd.DataFrame):
            raise TypeError("X must be a pandas DataFrame")
        if len(X) != len(y):
            raise ValueError(f"X has {len(X)} rows but y has {len(y)}")

        self.encoder_ = ReferenceLevelEncoder(
            numeric_features=list(self.numeric_features),
            categorical_features=list(self.categorical_features),
        )
        design = self.encoder_.fit_transform(X)
        target = np.asarray(y, dtype=float)

        self.regressor_ = LinearRegression(fit_intercept=True)
        self.regressor_.fit(design, target)

        self.feature_names_ = list(design.columns)
        self.terms_ = [INTERCEPT_TERM] + self.feature_names_
        self.coef_ = self.regressor_.coef_
        self.intercept_ = float(self.regressor_.intercept_)

        self._compute_inference(design.to_numpy(dtype=float), target)
        self.is_fitted_ = True
        return self

    @staticmethod
    def _estimable_columns(full_design: np.ndarray) -> List[int]:
        """Columns that raise the rank when added in term order.

        A column that is a linear combination of earlier ones is aliased: its
        coefficient is not identified and is reported as NaN.
        """
        kept: List[int] = []
        for column in range(full_design.shape[1]):
            candidate = kept + [column]
            if np.linalg.matrix_rank(full_design[:, candidate]) == len(candidate):
                kept.append(column)
        return kept

    def _compute_inference(self, design: np.ndarray, target: np.ndarray) -> None:
        """Standard errors and goodness of fit from the training residuals.

        Inference runs on the full-rank sub-design of estimable columns, so
        aliased terms get NaN in every column of the coefficient table.
        """
        n_obs = design.shape[0]
        full_design = np.column_stack([np.ones(n_obs), design])
        n_terms = full_design.shape[1]

        kept = self._estimable_columns(full_design)
        sub_design = full_design[:, kept]
        rank = len(kept)
        df_residual = n_obs - rank

        sub_estimates = np.linalg.lstsq(sub_design, target, rcond=None)[0]
        residuals = target - sub_design @ sub_estimates
        rss = float(residuals @ residuals)
        tss = float(((target - target.mean()) ** 2).sum())

        estimates = np.full(n_terms, np.nan)
        estimates[kept] = sub_estimates
        std_errors = np.full(n_terms, np.nan)
        t_values = np.full(n_terms, np.nan)
        p_values = np.full(n_terms, np.nan)

        if df_residual > 0:
            sigma2 = rss / df_residual
            covariance = sigma2 * np.linalg.inv(sub_design.T @ sub_design)
            sub_errors = np.sqrt(np.clip(np.diag(covariance), 0.0, None))
            with np.errstate(divide="ignore", invalid="ignore"):
                sub_t = np.where(sub_errors > 0, sub_estimates / sub_errors, np.nan)
            std_errors[kept] = sub_errors
            t_values[kept] = sub_t
            p_values[kept] = 2.0 * stats.t.sf(np.abs(sub_t), df_residual)
            residual_std_error = float(np.sqrt(sigma2))
        else:
            residual_std_error = float("nan")

        r_squared = 1.0 - rss / tss if tss > 0 else float("nan")
        if df_residual > 0 and tss > 0:
            adj_r_squared = 1.0 - (1.0 - r_squared) * (n_obs - 1) / df_residual
        else:
            adj_r_squared = float("nan")

        self.coefficient_table_ = pd.DataFrame(
            {
                "estimate": estimates,
                "std_error": std_errors,
                "t_value": t_values,
                "p_value": p_values,
            },
            index=pd.Index(self.terms_, name="term"),
        )
        self.training_summary_ = {
            "n_observations": n_obs,
            "n_parameters": n_terms,
            "rank": rank,
            "aliased_terms": [
                term for column, term in enumerate(self.terms_) if column not in kept
            ],
            "df_residual": df_residual,
            "r_squared": r_squared,
            "adj_r_squared": adj_r_squared,
            "residual_std_error": residual_std_error,
        }

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        """Predicted salary for every row of ``X``."""
        self._check_is_fitted()
        design = self.encoder_.transform(X)
        return self.regressor_.predict(design)

    def predict_one(self, record: Mapping[str, Any]) -> float:
        """Predicted salary for a single record given as a mapping."""
        return float(self.predict(pd.DataFrame([dict(record)]))[0])

    def coefficients(self) -> pd.Series:
        """Estimated coefficients indexed by term."""
        self._check_is_fitted()
        return self.coefficient_table_["estimate"].copy()

    def coefficient_table(self) -> pd.DataFrame:
        """Estimate, standard error, t value and p value per term."""
        self._check_is_fitted()
        return self.coefficient_table_.copy()

    def get_model_info(self) -> Dict[str, Any]:
        """Encoding scheme and fit statistics, for reports and run tracking."""
        self._check_is_fitted()
        return {
            "encoding": self.encoder_.get_encoding_details(),
            "training_summary": dict(self.training_summary_),
            "terms": list(self.terms_),
        }


def fit_salary_model(
    train: pd.DataFrame,
    target_column: str = "salary",
    model: Optional[SalaryRegressionModel] = None,
) -> SalaryRegressionModel:
    """Fit ``model`` (a default SalaryRegressionModel if None) on a training table."""
    model = model if model is not None else SalaryRegressionModel()
    features = list(model.numeric_features) + list(model.categorical_features)
    return model.fit(train[features], train[target_column])
