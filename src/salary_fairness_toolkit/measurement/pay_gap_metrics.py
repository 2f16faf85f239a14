"""Provides the calculations behind the pay fairness classification.

This module centralizes the residual, RMSE and status rules so that the
auditor, the plots and the tests all apply the exact same thresholds.
"""

from typing import Dict

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

UNDERPAID = "Underpaid"
FAIRLY_PAID = "Fairly Paid"
OVERPAID = "Overpaid"
FAIRNESS_STATUSES = [UNDERPAID, FAIRLY_PAID, OVERPAID]


class PayGapMetrics:
    """Static methods for residual-based pay fairness metrics.

    The fairness band is symmetric around zero with a half-width of one test
    RMSE. Both band edges belong to "Fairly Paid".
    """

    @staticmethod
    def rmse(y_true: np.ndarray, y_pred: np.ndarray) -> float:
        """Root mean squared error over all rows."""
        y_true = np.asarray(y_true, dtype=float)
        y_pred = np.asarray(y_pred, dtype=float)
        if y_true.size == 0:
            raise ValueError("Cannot compute RMSE on an empty test set")
        return float(np.sqrt(mean_squared_error(y_true, y_pred)))

    @staticmethod
    def salary_difference(y_true: np.ndarray, y_pred: np.ndarray) -> np.ndarray:
        """Actual minus predicted salary; negative means paid below the model."""
        return np.asarray(y_true, dtype=float) - np.asarray(y_pred, dtype=float)

    @staticmethod
    def fairness_status(salary_difference: np.ndarray, rmse: float) -> np.ndarray:
        """Label every residual as Underpaid, Overpaid or Fairly Paid."""
        if rmse < 0 or np.isnan(rmse):
            raise ValueError(f"RMSE must be a non-negative number, got {rmse}")
        difference = np.asarray(salary_difference, dtype=float)
        return np.where(
            difference < -rmse,
            UNDERPAID,
            np.where(difference > rmse, OVERPAID, FAIRLY_PAID),
        ).astype(object)

    @staticmethod
    def classify_difference(salary_difference: float, rmse: float) -> str:
        """Status of a single residual."""
        return str(PayGapMetrics.fairness_status(np.array([salary_difference]), rmse)[0])

    @staticmethod
    def calculate_all_metrics(y_true: np.ndarray, y_pred: np.ndarray) -> Dict[str, float]:
        """Calculates the error metrics reported for the test set.

        R-squared needs at least two rows and is reported as NaN otherwise.
        """
        y_true = np.asarray(y_true, dtype=float)
        y_pred = np.asarray(y_pred, dtype=float)
        difference = PayGapMetrics.salary_difference(y_true, y_pred)

        return {
            "rmse": PayGapMetrics.rmse(y_true, y_pred),
            "mae": float(mean_absolute_error(y_true, y_pred)),
            "r_squared": float(r2_score(y_true, y_pred)) if y_true.size > 1 else float("nan"),
            "mean_salary_difference": float(difference.mean()),
        }
