"""Unit tests for pay gap metrics."""

import numpy as np
import pytest

from salary_fairness_toolkit.measurement.pay_gap_metrics import (
    FAIRLY_PAID,
    FAIRNESS_STATUSES,
    OVERPAID,
    UNDERPAID,
    PayGapMetrics,
)


class TestPayGapMetrics:
    """Test cases for PayGapMetrics class."""

    def test_rmse(self):
        """Test RMSE against a hand computation."""
        y_true = np.array([10.0, 20.0, 30.0])
        y_pred = np.array([13.0, 16.0, 30.0])

        assert PayGapMetrics.rmse(y_true, y_pred) == pytest.approx(np.sqrt(25.0 / 3))

    def test_rmse_zero_iff_exact(self):
        """Test that RMSE is zero exactly when every prediction is exact."""
        y = np.array([50000.0, 60000.0])
        assert PayGapMetrics.rmse(y, y) == 0.0
        assert PayGapMetrics.rmse(y, y + np.array([0.0, 1.0])) > 0.0

    def test_rmse_empty(self):
        """Test that RMSE is undefined on an empty test set."""
        with pytest.raises(ValueError, match="empty"):
            PayGapMetrics.rmse(np.array([]), np.array([]))

    def test_salary_difference_sign(self):
        """Test that the difference is actual minus predicted."""
        difference = PayGapMetrics.salary_difference([50000.0, 70000.0], [55000.0, 60000.0])
        np.testing.assert_array_equal(difference, [-5000.0, 10000.0])

    @pytest.mark.parametrize(
        "difference,expected",
        [
            (-6000.0, UNDERPAID),
            (-5000.0, FAIRLY_PAID),
            (3000.0, FAIRLY_PAID),
            (0.0, FAIRLY_PAID),
            (5000.0, FAIRLY_PAID),
            (5001.0, OVERPAID),
        ],
    )
    def test_status_thresholds(self, difference, expected):
        """Test the ±RMSE band with RMSE 5000; band edges are fairly paid."""
        assert PayGapMetrics.classify_difference(difference, 5000.0) == expected

    def test_fairness_status_vectorised(self):
        """Test classification of a whole residual vector."""
        statuses = PayGapMetrics.fairness_status(np.array([-10.0, 0.0, 10.0]), 5.0)
        assert list(statuses) == FAIRNESS_STATUSES

    def test_zero_rmse(self):
        """Test that a zero band leaves only exact predictions fairly paid."""
        statuses = PayGapMetrics.fairness_status(np.array([-1.0, 0.0, 1.0]), 0.0)
        assert list(statuses) == [UNDERPAID, FAIRLY_PAID, OVERPAID]

    @pytest.mark.parametrize("rmse", [-1.0, float("nan")])
    def test_invalid_rmse(self, rmse):
        """Test that a negative or missing RMSE is refused."""
        with pytest.raises(ValueError):
            PayGapMetrics.fairness_status(np.array([0.0]), rmse)

    def test_calculate_all_metrics(self):
        """Test the metric dictionary."""
        y_true = np.array([100.0, 200.0, 300.0, 400.0])
        y_pred = np.array([110.0, 190.0, 300.0, 400.0])
        metrics = PayGapMetrics.calculate_all_metrics(y_true, y_pred)

        assert set(metrics) == {"rmse", "mae", "r_squared", "mean_salary_difference"}
        assert metrics["rmse"] == pytest.approx(np.sqrt(50.0))
        assert metrics["mae"] == pytest.approx(5.0)
        assert metrics["mean_salary_difference"] == pytest.approx(0.0)
        assert 0.99 < metrics["r_squared"] < 1.0

    def test_single_row_r_squared(self):
        """Test that R-squared is NaN for a single row."""
        metrics = PayGapMetrics.calculate_all_metrics(np.array([1.0]), np.array([2.0]))
        assert np.isnan(metrics["r_squared"])
        assert metrics["rmse"] == pytest.approx(1.0)
